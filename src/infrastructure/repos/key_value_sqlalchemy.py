from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.application.errors import InfrastructureError
from src.application.interfaces.repositories.key_value_store import KeyValueStore
from src.infrastructure.db.orm.kv_entry import KeyValueEntryORM


class KeyValueSQLAlchemyStore(KeyValueStore):
    """Key-value store on the `kv_entries` table, one short session per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(KeyValueEntryORM.value).where(KeyValueEntryORM.key == key)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"Could not read key {key!r}") from exc

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._session_factory() as session:
                orm = await session.get(KeyValueEntryORM, key)
                if orm is None:
                    session.add(KeyValueEntryORM(key=key, value=value))
                else:
                    orm.value = value
                await session.commit()
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"Could not write key {key!r}") from exc

    async def delete(self, key: str) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(delete(KeyValueEntryORM).where(KeyValueEntryORM.key == key))
                await session.commit()
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"Could not delete key {key!r}") from exc
