"""Backend REST client - core functions only.

The farm data lives in a hosted Postgres behind a PostgREST endpoint
(Supabase). Tables are addressed as ``/rest/v1/<table>`` and rows are
filtered with PostgREST operator strings such as ``eq.<id>`` or ``is.null``.
"""

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from farmhand.core.config import settings

REST_PATH = "/rest/v1"

# =============================================================================
# Retry Configuration
# =============================================================================

MAX_RETRIES = 3
MIN_WAIT_SECONDS = 1
MAX_WAIT_SECONDS = 10

REQUEST_TIMEOUT_SECONDS = 30


# =============================================================================
# Exceptions
# =============================================================================


class RetryableError(Exception):
    """Transient error that should be retried (timeouts, connection errors, 5xx)."""

    pass


class BackendAPIError(Exception):
    """Non-retryable error from the backend API."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


# =============================================================================
# Filter Helpers
# =============================================================================


def eq(value: str | int) -> str:
    """PostgREST equality filter."""
    return f"eq.{value}"


def is_null() -> str:
    """PostgREST IS NULL filter."""
    return "is.null"


def in_(values: list[str]) -> str:
    """PostgREST IN filter."""
    return f"in.({','.join(str(v) for v in values)})"


# =============================================================================
# Client Functions
# =============================================================================


def _table_url(table: str) -> str:
    return f"{settings.supabase_url.rstrip('/')}{REST_PATH}/{table}"


def _headers(prefer: str | None = None) -> dict[str, str]:
    headers = {
        "apikey": settings.supabase_key,
        "Authorization": f"Bearer {settings.supabase_key}",
        "Content-Type": "application/json",
    }
    if prefer:
        headers["Prefer"] = prefer
    return headers


async def request(
    method: str,
    table: str,
    *,
    params: dict | None = None,
    json: dict | list | None = None,
    prefer: str | None = None,
) -> list[dict]:
    """Execute a single REST call against a backend table.

    This is the low-level function that makes a single request without retry.
    For most use cases, prefer `request_with_retry()` which handles transient errors.

    Args:
        method: HTTP method (GET, POST, PATCH, DELETE)
        table: Table name, e.g. "grazing_events"
        params: Query parameters (PostgREST filters, select, order)
        json: Request body for inserts and updates
        prefer: Optional PostgREST Prefer header (e.g. "return=representation")

    Returns:
        Parsed JSON rows (empty list when the response has no body)

    Raises:
        httpx.HTTPStatusError: If the HTTP request fails
    """
    async with httpx.AsyncClient() as client:
        response = await client.request(
            method,
            _table_url(table),
            headers=_headers(prefer),
            params=params,
            json=json,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()

        if not response.content:
            return []

        result = response.json()
        if isinstance(result, dict):
            return [result]
        return result


@retry(
    retry=retry_if_exception_type(RetryableError),
    stop=stop_after_attempt(MAX_RETRIES),
    wait=wait_exponential_jitter(initial=MIN_WAIT_SECONDS, max=MAX_WAIT_SECONDS, jitter=2),
    reraise=True,
)
async def request_with_retry(
    method: str,
    table: str,
    *,
    params: dict | None = None,
    json: dict | list | None = None,
    prefer: str | None = None,
) -> list[dict]:
    """Execute a REST call with automatic retry on transient errors.

    Retries on:
    - Timeouts
    - Connection errors
    - HTTP 5xx errors

    Raises:
        RetryableError: If every attempt hit a transient error
        BackendAPIError: On client errors (4xx), which are never retried
    """
    try:
        return await request(method, table, params=params, json=json, prefer=prefer)
    except httpx.TimeoutException as e:
        raise RetryableError(f"Request timed out: {e}") from e
    except httpx.ConnectError as e:
        raise RetryableError(f"Connection failed: {e}") from e
    except httpx.HTTPStatusError as e:
        # Try to get the response body for better error messages
        try:
            body = e.response.text
        except Exception:
            body = "(unable to read response body)"

        if e.response.status_code >= 500:
            raise RetryableError(f"HTTP {e.response.status_code}: {body}") from e
        raise BackendAPIError(f"HTTP {e.response.status_code}: {body}", e.response.status_code) from e


async def select(table: str, filters: dict[str, str] | None = None, order: str | None = None) -> list[dict]:
    """Fetch rows matching the given PostgREST filters."""
    params = {"select": "*", **(filters or {})}
    if order:
        params["order"] = order
    return await request_with_retry("GET", table, params=params)


async def insert(table: str, row: dict | list[dict]) -> list[dict]:
    """Insert one or more rows and return them as stored."""
    return await request_with_retry("POST", table, json=row, prefer="return=representation")


async def update(table: str, filters: dict[str, str], values: dict) -> list[dict]:
    """Update rows matching the filters and return the changed rows."""
    if not filters:
        raise ValueError("Refusing to update without a filter")
    return await request_with_retry("PATCH", table, params=filters, json=values, prefer="return=representation")


async def delete(table: str, filters: dict[str, str]) -> list[dict]:
    """Delete rows matching the filters and return the deleted rows."""
    if not filters:
        raise ValueError("Refusing to delete without a filter")
    return await request_with_retry("DELETE", table, params=filters, prefer="return=representation")
