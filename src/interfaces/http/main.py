from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.application.alerts.manager import AlertManager
from src.application.interfaces.repositories.key_value_store import KeyValueStore
from src.config.settings import Settings, get_settings
from src.domain.models.alert import AlertSettings
from src.infrastructure.db.session import create_engine, create_schema, create_session_factory
from src.infrastructure.repos.herd_memory import InMemoryHerdDataSource
from src.infrastructure.repos.key_value_memory import InMemoryKeyValueStore
from src.infrastructure.repos.key_value_sqlalchemy import KeyValueSQLAlchemyStore
from src.infrastructure.scheduler.interval_runner import AsyncioIntervalRunner
from src.interfaces.http.routers import alerts, monitoring, performance, statistics
from src.interfaces.middleware.error_handler import register_error_handlers
from src.utils.datetime_tz import utc_now

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    owns_manager = getattr(app.state, "alert_manager", None) is None
    if owns_manager:
        app.state.alert_manager = await _build_alert_manager(app)
    try:
        yield
    finally:
        if owns_manager:
            await app.state.alert_manager.close()
            app.state.alert_manager = None
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            await engine.dispose()


async def _build_alert_manager(app: FastAPI) -> AlertManager:
    settings: Settings = app.state.settings
    store: KeyValueStore
    if settings.database_url:
        app.state.engine = create_engine(settings.database_url)
        await create_schema(app.state.engine)
        store = KeyValueSQLAlchemyStore(create_session_factory(app.state.engine))
    else:
        logger.info("No database configured; alert state is kept in memory")
        store = InMemoryKeyValueStore()

    return await AlertManager.create(
        store,
        app.state.herd_source,
        AsyncioIntervalRunner(name="alert-monitor"),
        default_settings=default_alert_settings(settings),
        settings_key=settings.alert_settings_key,
        alerts_key=settings.alerts_storage_key,
        history_limit=settings.alert_history_limit,
        persist_limit=settings.alert_persist_limit,
        dedup_window=settings.alert_dedup_window,
        clock=app.state.clock,
    )


def default_alert_settings(settings: Settings) -> AlertSettings:
    return AlertSettings(
        notification_enabled=settings.alert_notifications_enabled,
        check_interval=settings.alert_check_interval_minutes,
    )


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    root = logging.getLogger()
    # Avoid adding duplicate handlers on reload
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)
    # Align common libraries
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(name).setLevel(level)


def create_app(
    *,
    settings: Settings | None = None,
    alert_manager: AlertManager | None = None,
    herd_source: InMemoryHerdDataSource | None = None,
    clock: Callable[[], datetime] | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    _configure_logging(settings.log_level)
    app = FastAPI(
        title="Herd Analytics Backend",
        version="0.1.0",
        description="Herd statistics, metric monitoring, performance reports and alerts",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.clock = clock or utc_now
    app.state.herd_source = herd_source or InMemoryHerdDataSource()
    # A supplied manager is owned by the caller and not closed on shutdown
    app.state.alert_manager = alert_manager
    register_error_handlers(app)

    # Group all API routes behind a single versioned prefix
    api = APIRouter(prefix="/api/v1")
    api.include_router(statistics.router)
    api.include_router(monitoring.router)
    api.include_router(performance.router)
    api.include_router(alerts.router)

    @api.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(api)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
