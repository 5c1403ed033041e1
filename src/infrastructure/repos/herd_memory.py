from __future__ import annotations

import dataclasses

from src.application.interfaces.herd_data_source import HerdDataSource
from src.domain.models.herd import HerdSnapshot


class InMemoryHerdDataSource(HerdDataSource):
    """Holds the latest herd snapshot pushed by API callers."""

    def __init__(self, snapshot: HerdSnapshot | None = None) -> None:
        self._snapshot = snapshot or HerdSnapshot()

    def replace(self, snapshot: HerdSnapshot) -> None:
        self._snapshot = snapshot

    async def load(self) -> HerdSnapshot:
        # Shallow copies keep engine calls from sharing list objects
        return dataclasses.replace(
            self._snapshot,
            animals=list(self._snapshot.animals),
            litters=list(self._snapshot.litters),
            weights=list(self._snapshot.weights),
            treatments=list(self._snapshot.treatments),
            cages=list(self._snapshot.cages),
        )

    async def refresh(self) -> None:
        return None
