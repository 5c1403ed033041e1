from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from src.application.alerts.manager import AlertManager
from src.infrastructure.db.session import create_engine, create_schema, create_session_factory
from src.infrastructure.repos.key_value_sqlalchemy import KeyValueSQLAlchemyStore
from src.infrastructure.scheduler.interval_runner import AsyncioIntervalRunner


@pytest.fixture()
async def sql_store(tmp_path) -> AsyncIterator[KeyValueSQLAlchemyStore]:
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}")
    await create_schema(engine)
    yield KeyValueSQLAlchemyStore(create_session_factory(engine))
    await engine.dispose()


@pytest.mark.asyncio
async def test_get_set_delete(sql_store):
    assert await sql_store.get("missing") is None

    await sql_store.set("alerts", "[]")
    assert await sql_store.get("alerts") == "[]"

    await sql_store.set("alerts", '[{"id": "a"}]')
    assert await sql_store.get("alerts") == '[{"id": "a"}]'

    await sql_store.delete("alerts")
    assert await sql_store.get("alerts") is None
    await sql_store.delete("alerts")


@pytest.mark.asyncio
async def test_alert_state_round_trips_through_database(sql_store, herd_source, clock):
    manager = AlertManager(sql_store, herd_source, AsyncioIntervalRunner(), clock=clock)
    alert_id = await manager.add_reproduction_alert("Palpation due", "low", animal_id="doe")
    await manager.update_settings(notification_enabled=False, email_notifications=True)
    await manager.close()

    reloaded = AlertManager(sql_store, herd_source, AsyncioIntervalRunner(), clock=clock)
    await reloaded.load()

    alert = reloaded.get_alerts()[0]
    assert alert.id == alert_id
    assert alert.metadata == {"animalId": "doe"}
    assert [a.action for a in alert.actions] == ["view_animal", "plan_reproduction"]
    settings = reloaded.get_settings()
    assert settings.notification_enabled is False
    assert settings.email_notifications is True
