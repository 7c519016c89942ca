"""Datetime utilities for civil (zone-less) UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC time as a naive datetime at second resolution.

    Stored timestamps carry no zone and are serialized as plain ISO-8601.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
