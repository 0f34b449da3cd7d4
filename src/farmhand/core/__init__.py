"""Core module - configuration, backend client and units."""

from farmhand.core import client, units
from farmhand.core.client import (
    BackendAPIError,
    RetryableError,
    delete,
    eq,
    in_,
    insert,
    is_null,
    request,
    request_with_retry,
    select,
    update,
)
from farmhand.core.config import get_cache_dir, settings
from farmhand.core.units import (
    area_to_display,
    format_area,
    format_stocking_rate,
    is_imperial,
    square_meters_to_hectares,
)

__all__ = [
    "client",
    "units",
    "settings",
    "get_cache_dir",
    "request",
    "request_with_retry",
    "select",
    "insert",
    "update",
    "delete",
    "eq",
    "is_null",
    "in_",
    "BackendAPIError",
    "RetryableError",
    # Unit conversion helpers
    "square_meters_to_hectares",
    "area_to_display",
    "format_area",
    "format_stocking_rate",
    "is_imperial",
]
