"""Record shapes for farm entities and event logs.

Rows come back from the backend as plain dicts with snake_case keys and
ISO-8601 timestamp strings; these TypedDicts document what the rest of the
package reads from them.
"""

from datetime import UTC, date, datetime
from typing import Any, TypedDict

PADDOCK_TYPES = (
    "pasture",
    "cropping",
    "mixed",
    "native_bush",
    "wetland",
    "agroforestry",
    "other",
)

LIVESTOCK_TYPES = ("cattle", "sheep", "goats", "horses", "pigs", "chickens", "other")

MOB_STATUS_ACTIVE = "active"
MOB_STATUS_ARCHIVED = "archived"

# Mob event types
BIRTH = "birth"
SALE = "sale"
DEATH = "death"
PURCHASE = "purchase"
TREATMENT = "treatment"
OBSERVATION = "observation"
MOVEMENT = "movement"

MOB_EVENT_TYPES = (BIRTH, SALE, DEATH, PURCHASE, TREATMENT, OBSERVATION, MOVEMENT)

# Event types whose quantity changes the head count
HEAD_COUNT_EVENTS = (BIRTH, SALE, DEATH, PURCHASE)

TASK_STATUSES = ("todo", "in_progress", "completed")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")


class Paddock(TypedDict, total=False):
    id: str
    user_id: str
    name: str
    geometry: dict[str, Any]  # GeoJSON Polygon
    area: float  # square meters
    color: str
    type: str
    tree_species: str | None
    created_at: str


class Mob(TypedDict, total=False):
    id: str
    user_id: str
    name: str
    livestock_type: str
    size: int
    notes: str | None
    current_paddock_id: str | None
    status: str  # 'active' or 'archived'
    created_at: str


class GrazingEvent(TypedDict, total=False):
    id: str
    user_id: str
    mob_id: str
    paddock_id: str
    moved_in_at: str
    moved_out_at: str | None  # None while the mob is still in the paddock


class MobEvent(TypedDict, total=False):
    id: str
    user_id: str
    mob_id: str
    event_type: str
    quantity: int
    event_date: str
    notes: str | None
    loss_reason: str | None
    price_per_head: float | None
    total_price: float | None
    buyer_name: str | None


class Task(TypedDict, total=False):
    id: str
    title: str
    description: str | None
    status: str
    priority: str
    due_date: str | None
    related_paddock_ids: list[str]
    related_mob_id: str | None
    assigned_to: str | None


def utc_now() -> datetime:
    return datetime.now(UTC)


def parse_timestamp(value: str | datetime | date) -> datetime:
    """
    Parse a backend timestamp into an aware datetime.

    Accepts ISO strings with a trailing 'Z', offsets, or bare dates.
    Naive values are assumed to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def to_timestamp(value: datetime) -> str:
    """Serialize a datetime the way the backend stores it."""
    return parse_timestamp(value).isoformat()


def is_open(event: GrazingEvent) -> bool:
    """An open grazing event means the mob is still in that paddock."""
    return event.get("moved_out_at") is None


def is_active(mob: Mob) -> bool:
    return mob.get("status") == MOB_STATUS_ACTIVE


def find_record(identifier: str, records: list[dict]) -> dict:
    """
    Find a paddock or mob by id or case-insensitive name.

    Raises:
        ValueError: If nothing matches or the name is ambiguous
    """
    for record in records:
        if record.get("id") == identifier:
            return record

    matches = [r for r in records if (r.get("name") or "").lower() == identifier.lower()]
    if len(matches) > 1:
        ids = ", ".join(r["id"] for r in matches)
        raise ValueError(f"Multiple records named '{identifier}': {ids}")
    if not matches:
        raise ValueError(f"No record matches '{identifier}'")
    return matches[0]
