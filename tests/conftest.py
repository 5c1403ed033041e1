from __future__ import annotations

import sys
from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT))

# ruff: noqa: E402
from src.application.alerts.manager import AlertManager
from src.config.settings import Settings
from src.domain.models.animal import Animal
from src.domain.models.herd import HerdSnapshot
from src.domain.models.litter import Litter
from src.domain.models.treatment import Treatment
from src.domain.models.weight_record import WeightRecord
from src.infrastructure.repos.herd_memory import InMemoryHerdDataSource
from src.infrastructure.repos.key_value_memory import InMemoryKeyValueStore
from src.infrastructure.scheduler.interval_runner import AsyncioIntervalRunner
from src.interfaces.http.main import create_app

FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(FIXED_NOW)


def days_ago(days: int, *, now: datetime = FIXED_NOW) -> datetime:
    return now - timedelta(days=days)


@pytest.fixture()
def breeding_herd(now: datetime) -> HerdSnapshot:
    """One breeding doe with a litter last month, one growing kit, one consumed buck."""
    doe = Animal.create(
        "female", "breeder", name="Noisette", birth_date=days_ago(365 * 2, now=now), id="doe-1"
    )
    buck = Animal.create(
        "male",
        "consumed",
        name="Caramel",
        birth_date=days_ago(200, now=now),
        consumed_date=days_ago(3, now=now),
        consumed_weight=2400,
        id="buck-1",
    )
    kit = Animal.create(
        "female", "growing", birth_date=days_ago(60, now=now), cage_id="cage-1", id="kit-1"
    )
    litter = Litter.create(
        mother_id="doe-1",
        father_id="buck-1",
        breeding_date=days_ago(70, now=now),
        kindling_date=days_ago(40, now=now),
        born_alive=8,
        weaned_count=6,
        id="litter-1",
    )
    weights = [
        WeightRecord.create("kit-1", days_ago(30, now=now), 500, id="w-1"),
        WeightRecord.create("kit-1", days_ago(0, now=now), 1400, id="w-2"),
        WeightRecord.create("doe-1", days_ago(10, now=now), 4200, id="w-3"),
    ]
    treatments = [
        Treatment.create("doe-1", days_ago(5, now=now), "Ivermectin", withdrawal_days=28, id="t-1"),
    ]
    return HerdSnapshot(
        animals=[doe, buck, kit], litters=[litter], weights=weights, treatments=treatments
    )


@pytest.fixture()
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def herd_source() -> InMemoryHerdDataSource:
    return InMemoryHerdDataSource()


@pytest.fixture()
async def alert_manager(
    kv_store: InMemoryKeyValueStore, herd_source: InMemoryHerdDataSource, clock: FakeClock
) -> AsyncIterator[AlertManager]:
    manager = AlertManager(kv_store, herd_source, AsyncioIntervalRunner(), clock=clock)
    await manager.load()
    yield manager
    await manager.close()


@pytest.fixture()
def test_settings() -> Settings:
    return Settings.model_validate(
        {
            "database_url": None,
            "log_level": "INFO",
            "environment": "test",
            "alert_notifications_enabled": False,
        }
    )


@pytest.fixture()
def app(test_settings: Settings, alert_manager: AlertManager, herd_source, clock: FakeClock):
    return create_app(
        settings=test_settings, alert_manager=alert_manager, herd_source=herd_source, clock=clock
    )


@pytest.fixture()
async def client(app) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
