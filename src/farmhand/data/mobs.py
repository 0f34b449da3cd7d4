"""Mob records and their grazing history.

Creating a mob in a paddock opens its first grazing event. Moving a mob
goes through `farmhand.grazing.movement.move_mob`, never a plain update,
so the open grazing event and `current_paddock_id` stay in step.
"""

from datetime import datetime

import httpx

from farmhand.core import client
from farmhand.core.client import BackendAPIError, RetryableError, eq
from farmhand.data.mob_events import build_purchase_notes
from farmhand.data.models import (
    LIVESTOCK_TYPES,
    MOB_STATUS_ACTIVE,
    MOB_STATUS_ARCHIVED,
    PURCHASE,
    GrazingEvent,
    Mob,
    to_timestamp,
    utc_now,
)

# Fields owned by other operations: paddock via move_mob, size via the event log
PROTECTED_FIELDS = ("current_paddock_id", "size")

# Tables holding rows that belong to a mob, deleted before the mob itself
MOB_DEPENDENT_TABLES = (
    ("tasks", "related_mob_id"),
    ("animals", "mob_id"),
    ("mob_events", "mob_id"),
    ("grazing_events", "mob_id"),
)


async def get_mobs(owner_id: str, include_archived: bool = False) -> list[Mob]:
    """Fetch the owner's mobs (active only unless include_archived)."""
    filters = {"user_id": eq(owner_id)}
    if not include_archived:
        filters["status"] = eq(MOB_STATUS_ACTIVE)
    return await client.select("mobs", filters)


async def get_grazing_events(owner_id: str) -> list[GrazingEvent]:
    """Fetch every grazing event for the owner's farm."""
    return await client.select("grazing_events", {"user_id": eq(owner_id)}, order="moved_in_at.asc")


async def _discard_mob(mob_id: str, owner_id: str) -> None:
    """Remove a half-created mob so it never points at a paddock it isn't grazing."""
    try:
        await client.delete("mobs", {"id": eq(mob_id), "user_id": eq(owner_id)})
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"  Warning: could not remove mob {mob_id} after failed create: {e}")


async def create_mob(
    owner_id: str,
    name: str,
    livestock_type: str,
    size: int,
    notes: str | None = None,
    paddock_id: str | None = None,
    price_per_head: float | None = None,
    age: str | None = None,
    avg_weight: str | None = None,
    condition: str | None = None,
    now: datetime | None = None,
) -> Mob | None:
    """
    Create a mob, optionally placing it in a paddock.

    If any purchase details are given, a purchase event for the whole mob is
    logged too. A failed purchase event does not undo the mob, but a failed
    grazing event does: the mob row is deleted again.

    Returns:
        The stored mob, or None if the backend rejected it
    """
    if livestock_type not in LIVESTOCK_TYPES:
        raise ValueError(f"Unknown livestock type '{livestock_type}'. Expected one of: {', '.join(LIVESTOCK_TYPES)}")
    if size < 0:
        raise ValueError("Mob size cannot be negative")

    if now is None:
        now = utc_now()
    timestamp = to_timestamp(now)

    try:
        rows = await client.insert(
            "mobs",
            {
                "user_id": owner_id,
                "name": name,
                "livestock_type": livestock_type,
                "size": size,
                "notes": notes or None,
                "current_paddock_id": paddock_id,
                "status": MOB_STATUS_ACTIVE,
            },
        )
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"Error creating mob: {e}")
        return None

    if not rows:
        return None
    mob = rows[0]

    if paddock_id:
        try:
            await client.insert(
                "grazing_events",
                {
                    "user_id": owner_id,
                    "mob_id": mob["id"],
                    "paddock_id": paddock_id,
                    "moved_in_at": timestamp,
                },
            )
        except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
            print(f"Error opening grazing event for new mob: {e}")
            await _discard_mob(mob["id"], owner_id)
            return None

    if price_per_head or age or avg_weight or condition:
        try:
            await client.insert(
                "mob_events",
                {
                    "user_id": owner_id,
                    "mob_id": mob["id"],
                    "event_type": PURCHASE,
                    "quantity": size,
                    "price_per_head": price_per_head,
                    "total_price": price_per_head * size if price_per_head else None,
                    "notes": build_purchase_notes(notes, age, avg_weight, condition),
                    "event_date": timestamp,
                },
            )
        except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
            print(f"  Warning: mob created but purchase event failed: {e}")

    return mob


async def update_mob(mob_id: str, updates: dict, *, owner_id: str) -> bool:
    """
    Update descriptive mob fields (name, type, notes).

    Raises:
        ValueError: If asked to change the paddock or size directly
    """
    protected = [f for f in PROTECTED_FIELDS if f in updates]
    if protected:
        raise ValueError(
            f"Cannot update {', '.join(protected)} directly; move the mob or record a mob event instead"
        )

    try:
        await client.update("mobs", {"id": eq(mob_id), "user_id": eq(owner_id)}, updates)
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"Error updating mob: {e}")
        return False
    return True


async def archive_mob(mob_id: str, *, owner_id: str) -> bool:
    """Soft delete: hide the mob but keep its events, sales and purchases."""
    try:
        await client.update(
            "mobs",
            {"id": eq(mob_id), "user_id": eq(owner_id)},
            {"status": MOB_STATUS_ARCHIVED},
        )
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"Error archiving mob: {e}")
        return False
    return True


async def delete_mob(mob_id: str, *, owner_id: str) -> bool:
    """
    Hard delete: remove the mob and everything that references it.

    Tasks, animals, mob events and grazing events go first, then the mob.
    Stops at the first failure; rows already deleted stay deleted.
    """
    try:
        for table, column in MOB_DEPENDENT_TABLES:
            await client.delete(table, {column: eq(mob_id), "user_id": eq(owner_id)})
        await client.delete("mobs", {"id": eq(mob_id), "user_id": eq(owner_id)})
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"Error deleting mob: {e}")
        return False
    return True
