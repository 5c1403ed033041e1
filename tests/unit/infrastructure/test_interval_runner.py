from __future__ import annotations

import asyncio

import pytest

from src.infrastructure.scheduler.interval_runner import AsyncioIntervalRunner


@pytest.mark.asyncio
async def test_runner_fires_until_stopped():
    calls = 0

    async def tick():
        nonlocal calls
        calls += 1

    runner = AsyncioIntervalRunner()
    runner.start(0.01, tick)
    await asyncio.sleep(0.1)
    assert runner.running
    assert calls >= 1

    await runner.aclose()
    fired = calls
    await asyncio.sleep(0.05)
    assert calls == fired
    assert not runner.running


@pytest.mark.asyncio
async def test_restart_replaces_previous_schedule():
    async def tick():
        return None

    runner = AsyncioIntervalRunner()
    runner.start(60, tick)
    first = runner._task
    runner.start(30, tick)
    await asyncio.sleep(0.01)

    assert first.cancelled()
    assert runner.interval_seconds == 30
    await runner.aclose()


@pytest.mark.asyncio
async def test_failing_callback_keeps_schedule_alive():
    calls = 0

    async def boom():
        nonlocal calls
        calls += 1
        raise RuntimeError("check failed")

    runner = AsyncioIntervalRunner()
    runner.start(0.01, boom)
    await asyncio.sleep(0.1)
    await runner.aclose()

    assert calls >= 2


def test_interval_must_be_positive():
    runner = AsyncioIntervalRunner()
    with pytest.raises(ValueError):
        runner.start(0, lambda: None)
