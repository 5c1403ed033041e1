from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from uuid import uuid4


@dataclass(slots=True)
class WeightRecord:
    id: str
    animal_id: str
    date: date | datetime | str | None
    weight_grams: float

    @classmethod
    def create(
        cls,
        animal_id: str,
        date: date | datetime | str | None,
        weight_grams: float,
        id: str | None = None,
    ) -> WeightRecord:
        return cls(id=id or str(uuid4()), animal_id=animal_id, date=date, weight_grams=weight_grams)
