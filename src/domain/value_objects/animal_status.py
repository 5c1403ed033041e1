from __future__ import annotations

from enum import Enum


class AnimalStatus(str, Enum):
    BREEDER = "breeder"
    GROWING = "growing"
    RETIRED = "retired"
    DECEASED = "deceased"
    CONSUMED = "consumed"

    def is_active(self) -> bool:
        return self not in {AnimalStatus.DECEASED, AnimalStatus.CONSUMED}
