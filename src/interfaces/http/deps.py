from __future__ import annotations

from datetime import datetime

from fastapi import Request

from src.application.alerts.manager import AlertManager
from src.config.settings import Settings
from src.infrastructure.repos.herd_memory import InMemoryHerdDataSource


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_now(request: Request) -> datetime:
    """Request-scoped "now" taken from the app clock."""
    return request.app.state.clock()


def get_alert_manager(request: Request) -> AlertManager:
    manager = getattr(request.app.state, "alert_manager", None)
    if manager is None:
        raise RuntimeError("Alert manager not configured")
    return manager


def get_herd_source(request: Request) -> InMemoryHerdDataSource:
    source = getattr(request.app.state, "herd_source", None)
    if source is None:
        raise RuntimeError("Herd data source not configured")
    return source
