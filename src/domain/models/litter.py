from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from uuid import uuid4


@dataclass(slots=True)
class Litter:
    id: str
    mother_id: str
    father_id: str | None = None
    breeding_date: date | datetime | str | None = None
    # None means the pregnancy has not been resolved yet
    kindling_date: date | datetime | str | None = None
    born_alive: int = 0
    stillborn: int = 0
    weaned_count: int | None = None

    @classmethod
    def create(
        cls,
        mother_id: str,
        father_id: str | None = None,
        breeding_date: date | datetime | str | None = None,
        kindling_date: date | datetime | str | None = None,
        born_alive: int = 0,
        stillborn: int = 0,
        weaned_count: int | None = None,
        id: str | None = None,
    ) -> Litter:
        return cls(
            id=id or str(uuid4()),
            mother_id=mother_id,
            father_id=father_id,
            breeding_date=breeding_date,
            kindling_date=kindling_date,
            born_alive=born_alive,
            stillborn=stillborn,
            weaned_count=weaned_count,
        )

    def involves(self, animal_id: str) -> bool:
        return self.mother_id == animal_id or self.father_id == animal_id
