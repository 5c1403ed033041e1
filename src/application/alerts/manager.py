"""Alert lifecycle: threshold checks, de-duplication, persistence, fan-out.

One manager instance is built by the application's composition root and
shared through dependency injection. All list mutations go through
`_lock` so a scheduled check and a manual check cannot both add an alert
for the same metric inside the de-duplication window.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from pydantic import TypeAdapter

from src.application.alerts.factory import (
    HEALTH_ALERT_TITLE,
    PERFORMANCE_ALERT_TITLE,
    REPRODUCTION_ALERT_TITLE,
    build_custom_notification,
    build_metric_notification,
    format_performance_message,
    health_actions,
    performance_actions,
    performance_severity,
    reproduction_actions,
)
from src.application.analytics.monitoring import calculate_real_time_metrics, check_alerts
from src.application.errors import ValidationError
from src.application.interfaces.herd_data_source import HerdDataSource
from src.application.interfaces.repositories.key_value_store import KeyValueStore
from src.application.interfaces.scheduler import PeriodicScheduler
from src.domain.models.alert import AlertAction, AlertNotification, AlertSettings
from src.domain.models.herd import HerdSnapshot
from src.domain.value_objects.severity import Severity
from src.utils.datetime_tz import to_utc, utc_now

logger = logging.getLogger(__name__)

AlertSubscriber = Callable[[list[AlertNotification]], None]

DEFAULT_SETTINGS_KEY = "herd-alert-settings"
DEFAULT_ALERTS_KEY = "herd-alerts"

_ALERTS_ADAPTER = TypeAdapter(list[AlertNotification])
_SETTINGS_ADAPTER = TypeAdapter(AlertSettings)


class AlertManager:
    def __init__(
        self,
        store: KeyValueStore,
        data_source: HerdDataSource,
        scheduler: PeriodicScheduler,
        *,
        default_settings: AlertSettings | None = None,
        settings_key: str = DEFAULT_SETTINGS_KEY,
        alerts_key: str = DEFAULT_ALERTS_KEY,
        history_limit: int = 100,
        persist_limit: int = 50,
        dedup_window: timedelta = timedelta(minutes=60),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._data_source = data_source
        self._scheduler = scheduler
        self._default_settings = default_settings or AlertSettings()
        self._settings_key = settings_key
        self._alerts_key = alerts_key
        self._history_limit = history_limit
        self._persist_limit = persist_limit
        self._dedup_window = dedup_window
        self._clock = clock

        self._settings = _copy_settings(self._default_settings)
        self._alerts: list[AlertNotification] = []
        self._subscribers: list[AlertSubscriber] = []
        self._lock = asyncio.Lock()

    @classmethod
    async def create(
        cls,
        store: KeyValueStore,
        data_source: HerdDataSource,
        scheduler: PeriodicScheduler,
        **kwargs: Any,
    ) -> AlertManager:
        """Build a manager, restore persisted state and start monitoring."""
        manager = cls(store, data_source, scheduler, **kwargs)
        await manager.load()
        manager.start_monitoring()
        return manager

    # Persistence

    async def load(self) -> None:
        """Restore settings and alerts, keeping defaults for missing or corrupt data."""
        raw_settings = await self._read(self._settings_key)
        if raw_settings:
            try:
                self._settings = _SETTINGS_ADAPTER.validate_json(raw_settings)
            except ValueError as exc:
                logger.warning("Ignoring corrupt alert settings: %s", exc)
            if self._settings.check_interval <= 0:
                logger.warning(
                    "Ignoring stored check interval %r; using %d minutes",
                    self._settings.check_interval,
                    self._default_settings.check_interval,
                )
                self._settings.check_interval = self._default_settings.check_interval

        raw_alerts = await self._read(self._alerts_key)
        if raw_alerts:
            try:
                self._alerts = _ALERTS_ADAPTER.validate_json(raw_alerts)[: self._history_limit]
            except ValueError as exc:
                logger.warning("Ignoring corrupt stored alerts: %s", exc)

    async def _read(self, key: str) -> str | None:
        try:
            return await self._store.get(key)
        except Exception as exc:
            logger.warning("Could not read %s from store: %s", key, exc)
            return None

    async def _write(self, key: str, value: bytes) -> None:
        try:
            await self._store.set(key, value.decode("utf-8"))
        except Exception as exc:
            logger.warning("Could not save %s to store: %s", key, exc, exc_info=True)

    async def _save_alerts(self) -> None:
        recent = self._alerts[: self._persist_limit]
        await self._write(self._alerts_key, _ALERTS_ADAPTER.dump_json(recent))

    async def _save_settings(self) -> None:
        await self._write(self._settings_key, _SETTINGS_ADAPTER.dump_json(self._settings))

    # Monitoring

    def start_monitoring(self) -> None:
        """(Re)schedule periodic checks; a disabled configuration only clears the schedule."""
        self._scheduler.stop()
        if not self._settings.notification_enabled:
            logger.info("Alert monitoring disabled by settings")
            return
        self._scheduler.start(self._settings.check_interval * 60, self.check_all_metrics)
        logger.info("Alert monitoring every %d minutes", self._settings.check_interval)

    def stop_monitoring(self) -> None:
        self._scheduler.stop()

    @property
    def monitoring(self) -> bool:
        return self._scheduler.running

    async def check_all_metrics(self) -> list[AlertNotification]:
        herd = await self._data_source.load()
        return await self._evaluate(herd)

    async def trigger_manual_check(
        self, herd: HerdSnapshot | None = None
    ) -> list[AlertNotification]:
        """Run a check now and return the alerts that survived de-duplication."""
        if herd is None:
            await self._data_source.refresh()
            herd = await self._data_source.load()
        return await self._evaluate(herd)

    async def _evaluate(self, herd: HerdSnapshot) -> list[AlertNotification]:
        now = self._clock()
        metrics = calculate_real_time_metrics(
            herd.animals, herd.litters, herd.weights, herd.treatments, herd.cages, now=now
        )
        breaches = check_alerts(metrics, self._settings.thresholds, now=now)
        return await self._add_alerts([build_metric_notification(b) for b in breaches], now)

    async def _add_alerts(
        self, candidates: list[AlertNotification], now: datetime
    ) -> list[AlertNotification]:
        async with self._lock:
            cutoff = now - self._dedup_window
            recent_metrics = {
                alert.metric
                for alert in self._alerts
                if alert.metric is not None and to_utc(alert.timestamp) > cutoff
            }
            fresh = [c for c in candidates if c.metric is None or c.metric not in recent_metrics]
            if not fresh:
                return []

            self._alerts = (fresh + self._alerts)[: self._history_limit]
            logger.info("Added %d metric alert(s)", len(fresh))
            self._notify_subscribers()
            await self._save_alerts()
            return fresh

    # Caller-driven alerts

    async def add_custom_alert(
        self,
        title: str,
        message: str,
        severity: Severity | str = Severity.MEDIUM,
        actions: list[AlertAction] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        alert = build_custom_notification(
            title, message, severity, self._clock(), actions=actions, metadata=metadata
        )
        async with self._lock:
            self._alerts = [alert, *self._alerts][: self._history_limit]
            self._notify_subscribers()
            await self._save_alerts()
        logger.info("Added %s alert %s", alert.severity.value, alert.id)
        return alert.id

    async def add_health_alert(
        self,
        animal_name: str,
        condition: str,
        severity: Severity | str = Severity.MEDIUM,
        animal_id: str | None = None,
    ) -> str:
        return await self.add_custom_alert(
            HEALTH_ALERT_TITLE,
            f"{animal_name}: {condition}",
            severity,
            actions=health_actions(),
            metadata={"animalId": animal_id} if animal_id else None,
        )

    async def add_reproduction_alert(
        self,
        message: str,
        severity: Severity | str = Severity.MEDIUM,
        animal_id: str | None = None,
    ) -> str:
        return await self.add_custom_alert(
            REPRODUCTION_ALERT_TITLE,
            message,
            severity,
            actions=reproduction_actions(animal_id),
            metadata={"animalId": animal_id} if animal_id else None,
        )

    async def add_performance_alert(
        self, metric_name: str, current_value: float, threshold: float
    ) -> str:
        return await self.add_custom_alert(
            PERFORMANCE_ALERT_TITLE,
            format_performance_message(metric_name, current_value, threshold),
            performance_severity(current_value, threshold),
            actions=performance_actions(),
            metadata={
                "metricName": metric_name,
                "currentValue": current_value,
                "threshold": threshold,
            },
        )

    # Lifecycle transitions

    async def acknowledge_alert(self, alert_id: str) -> bool:
        async with self._lock:
            alert = next((a for a in self._alerts if a.id == alert_id), None)
            if alert is None:
                return False
            alert.acknowledge()
            self._notify_subscribers()
            await self._save_alerts()
            return True

    async def dismiss_alert(self, alert_id: str) -> bool:
        async with self._lock:
            remaining = [a for a in self._alerts if a.id != alert_id]
            if len(remaining) == len(self._alerts):
                return False
            self._alerts = remaining
            self._notify_subscribers()
            await self._save_alerts()
            return True

    async def dismiss_all_alerts(self) -> None:
        async with self._lock:
            self._alerts = []
            self._notify_subscribers()
            await self._save_alerts()

    # Queries

    def get_alerts(self) -> list[AlertNotification]:
        return list(self._alerts)

    def get_unacknowledged_alerts(self) -> list[AlertNotification]:
        return [a for a in self._alerts if not a.acknowledged]

    def get_alerts_by_severity(self, severity: Severity | str) -> list[AlertNotification]:
        severity = Severity(severity)
        return [a for a in self._alerts if a.severity == severity]

    # Subscriptions

    def subscribe(self, callback: AlertSubscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify_subscribers(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(list(self._alerts))
            except Exception as exc:
                logger.error("Alert subscriber %r failed: %s", callback, exc, exc_info=True)

    # Settings

    def get_settings(self) -> AlertSettings:
        return _copy_settings(self._settings)

    async def update_settings(self, **changes: Any) -> AlertSettings:
        """Apply a partial update, persist it and reschedule monitoring."""
        interval = changes.get("check_interval")
        if interval is not None and interval <= 0:
            raise ValidationError(
                "check_interval must be positive", details={"check_interval": interval}
            )
        self._settings = dataclasses.replace(self._settings, **changes)
        await self._save_settings()
        self.start_monitoring()
        return self.get_settings()

    # Teardown

    async def reset(self) -> None:
        """Return to defaults: no alerts, no subscribers, no schedule, nothing stored."""
        self._scheduler.stop()
        async with self._lock:
            self._alerts = []
            self._subscribers = []
            self._settings = _copy_settings(self._default_settings)
            for key in (self._alerts_key, self._settings_key):
                try:
                    await self._store.delete(key)
                except Exception as exc:
                    logger.warning("Could not clear %s from store: %s", key, exc)

    async def close(self) -> None:
        await self._scheduler.aclose()


def _copy_settings(settings: AlertSettings) -> AlertSettings:
    return dataclasses.replace(
        settings, thresholds=[dataclasses.replace(t) for t in settings.thresholds]
    )
