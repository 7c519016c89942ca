"""Async engine construction and connection-pool policy."""

import time

from sqlalchemy import event, exc
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from libs.common.config import Settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


def pool_options(settings: Settings) -> dict:
    """Translate the millisecond pool settings into QueuePool arguments."""
    maximum = max(settings.DB_POOL_MAXIMUM_POOL_SIZE, 1)
    minimum_idle = min(settings.DB_POOL_MINIMUM_IDLE, maximum)
    return {
        "pool_pre_ping": True,  # Probe connections before handing them out
        "pool_size": minimum_idle,
        "max_overflow": maximum - minimum_idle,
        "pool_timeout": settings.DB_POOL_CONNECTION_TIMEOUT / 1000,
        "pool_recycle": settings.DB_POOL_MAX_LIFETIME // 1000,
    }


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the process-wide async engine for ``settings``."""
    url = settings.database_url
    options: dict = {
        "echo": settings.DB_ECHO,
        "hide_parameters": True,
    }
    if not url.startswith("sqlite"):
        options.update(pool_options(settings))

    engine = create_async_engine(url, **options)
    if not url.startswith("sqlite"):
        install_pool_listeners(
            engine,
            idle_timeout_ms=settings.DB_POOL_IDLE_TIMEOUT,
            leak_threshold_ms=settings.DB_POOL_LEAK_DETECTION_THRESHOLD,
        )
    return engine


def install_pool_listeners(
    engine: AsyncEngine, *, idle_timeout_ms: int, leak_threshold_ms: int
) -> None:
    """Discard connections idle past the timeout and warn on long checkouts."""
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "checkin")
    def _on_checkin(dbapi_connection, connection_record):
        now = time.monotonic()
        checked_out_at = connection_record.info.pop("checked_out_at", None)
        if checked_out_at is not None and leak_threshold_ms > 0:
            held_ms = (now - checked_out_at) * 1000
            if held_ms > leak_threshold_ms:
                logger.warning(
                    "Connection held for %.0f ms (leak detection threshold %d ms)",
                    held_ms,
                    leak_threshold_ms,
                )
        connection_record.info["idle_since"] = now

    @event.listens_for(sync_engine, "checkout")
    def _on_checkout(dbapi_connection, connection_record, connection_proxy):
        now = time.monotonic()
        idle_since = connection_record.info.get("idle_since")
        if (
            idle_since is not None
            and idle_timeout_ms > 0
            and (now - idle_since) * 1000 > idle_timeout_ms
        ):
            connection_record.info.pop("idle_since", None)
            # The pool retries checkout with a fresh connection
            raise exc.DisconnectionError("Connection exceeded idle timeout")
        connection_record.info["checked_out_at"] = now
