from __future__ import annotations

from pydantic import BaseModel, Field

from src.domain.models.animal import Animal
from src.domain.models.cage import Cage
from src.domain.models.herd import HerdSnapshot
from src.domain.models.litter import Litter
from src.domain.models.treatment import Treatment, TreatmentRoute
from src.domain.models.weight_record import WeightRecord
from src.domain.value_objects.animal_status import AnimalStatus
from src.domain.value_objects.sex import Sex

# Dates travel as ISO strings; unparseable values are kept and later
# excluded from date-based aggregates instead of failing the request.


class AnimalIn(BaseModel):
    id: str
    sex: Sex = Sex.UNKNOWN
    status: AnimalStatus
    name: str | None = None
    identifier: str | None = None
    breed: str | None = None
    birth_date: str | None = None
    cage_id: str | None = None
    mother_id: str | None = None
    father_id: str | None = None
    consumed_date: str | None = None
    consumed_weight: float | None = Field(default=None, ge=0)
    created_at: str | None = None

    def to_domain(self) -> Animal:
        return Animal.create(**self.model_dump())


class LitterIn(BaseModel):
    id: str | None = None
    mother_id: str
    father_id: str | None = None
    breeding_date: str | None = None
    kindling_date: str | None = None
    born_alive: int = Field(default=0, ge=0)
    stillborn: int = Field(default=0, ge=0)
    weaned_count: int | None = Field(default=None, ge=0)

    def to_domain(self) -> Litter:
        return Litter.create(**self.model_dump())


class WeightRecordIn(BaseModel):
    id: str | None = None
    animal_id: str
    date: str | None = None
    weight_grams: float = Field(ge=0)

    def to_domain(self) -> WeightRecord:
        return WeightRecord.create(**self.model_dump())


class TreatmentIn(BaseModel):
    id: str | None = None
    animal_id: str
    date: str | None = None
    product: str
    withdrawal_until: str | None = None
    withdrawal_days: int | None = Field(default=None, ge=0)
    lot_number: str | None = None
    dose: str | None = None
    route: TreatmentRoute | None = None
    reason: str | None = None

    def to_domain(self) -> Treatment:
        return Treatment.create(**self.model_dump())


class CageIn(BaseModel):
    id: str
    name: str | None = None
    capacity: int | None = Field(default=None, ge=0)
    location: str | None = None

    def to_domain(self) -> Cage:
        return Cage(**self.model_dump())


class HerdPayload(BaseModel):
    animals: list[AnimalIn] = Field(default_factory=list)
    litters: list[LitterIn] = Field(default_factory=list)
    weights: list[WeightRecordIn] = Field(default_factory=list)
    treatments: list[TreatmentIn] = Field(default_factory=list)
    cages: list[CageIn] = Field(default_factory=list)

    def to_domain(self) -> HerdSnapshot:
        return HerdSnapshot(
            animals=[a.to_domain() for a in self.animals],
            litters=[litter.to_domain() for litter in self.litters],
            weights=[w.to_domain() for w in self.weights],
            treatments=[t.to_domain() for t in self.treatments],
            cages=[c.to_domain() for c in self.cages],
        )
