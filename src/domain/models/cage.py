from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Cage:
    id: str
    name: str | None = None
    capacity: int | None = None
    location: str | None = None
