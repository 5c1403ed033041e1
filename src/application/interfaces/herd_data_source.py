from __future__ import annotations

from typing import Protocol

from src.domain.models.herd import HerdSnapshot


class HerdDataSource(Protocol):
    """Supplies the entity collections scheduled alert checks run against."""

    async def load(self) -> HerdSnapshot: ...
    async def refresh(self) -> None: ...
