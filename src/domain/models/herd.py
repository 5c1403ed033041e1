from __future__ import annotations

from dataclasses import dataclass, field

from src.domain.models.animal import Animal
from src.domain.models.cage import Cage
from src.domain.models.litter import Litter
from src.domain.models.treatment import Treatment
from src.domain.models.weight_record import WeightRecord


@dataclass(slots=True)
class HerdSnapshot:
    """The five entity collections every engine call reads from."""

    animals: list[Animal] = field(default_factory=list)
    litters: list[Litter] = field(default_factory=list)
    weights: list[WeightRecord] = field(default_factory=list)
    treatments: list[Treatment] = field(default_factory=list)
    cages: list[Cage] = field(default_factory=list)
