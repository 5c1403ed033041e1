from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from uuid import uuid4

from src.domain.value_objects.animal_status import AnimalStatus
from src.domain.value_objects.sex import Sex


@dataclass(slots=True)
class Animal:
    id: str
    sex: Sex
    status: AnimalStatus
    name: str | None = None
    identifier: str | None = None
    breed: str | None = None
    birth_date: date | datetime | str | None = None
    cage_id: str | None = None

    # Genealogy fields (weak references, looked up by id)
    mother_id: str | None = None
    father_id: str | None = None

    # Consumption fields, only meaningful when status is CONSUMED
    consumed_date: date | datetime | str | None = None
    consumed_weight: float | None = None

    created_at: datetime | str | None = None

    @classmethod
    def create(
        cls,
        sex: Sex | str,
        status: AnimalStatus | str,
        name: str | None = None,
        identifier: str | None = None,
        breed: str | None = None,
        birth_date: date | datetime | str | None = None,
        cage_id: str | None = None,
        mother_id: str | None = None,
        father_id: str | None = None,
        consumed_date: date | datetime | str | None = None,
        consumed_weight: float | None = None,
        created_at: datetime | str | None = None,
        id: str | None = None,
    ) -> Animal:
        return cls(
            id=id or str(uuid4()),
            sex=Sex(sex),
            status=AnimalStatus(status),
            name=name,
            identifier=identifier,
            breed=breed,
            birth_date=birth_date,
            cage_id=cage_id,
            mother_id=mother_id,
            father_id=father_id,
            consumed_date=consumed_date,
            consumed_weight=consumed_weight,
            created_at=created_at,
        )

    @property
    def is_active(self) -> bool:
        return self.status.is_active()

    @property
    def label(self) -> str:
        return self.name or self.identifier or self.id
