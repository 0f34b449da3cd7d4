"""
Mob event log: births, sales, losses, purchases and notes.

The log is append-only. Each recorder writes the event first and then
refreshes the mob's cached `size`, which is the running head count the rest
of the app shows. Analytics always read the log, never the cached size.
"""

from datetime import datetime

import httpx

from farmhand.core import client
from farmhand.core.client import BackendAPIError, RetryableError, eq
from farmhand.data.models import (
    BIRTH,
    DEATH,
    OBSERVATION,
    PURCHASE,
    SALE,
    TREATMENT,
    Mob,
    MobEvent,
    to_timestamp,
    utc_now,
)


class InvalidQuantityError(ValueError):
    """Raised before writing when an event quantity is impossible for the mob."""

    pass


def apply_event_to_size(size: int, event_type: str, quantity: int) -> int:
    """Head count after an event; only births, purchases, sales and deaths count."""
    if event_type in (BIRTH, PURCHASE):
        return size + quantity
    if event_type in (SALE, DEATH):
        return size - quantity
    return size


def validate_quantity(mob: Mob, event_type: str, quantity: int) -> None:
    """
    Reject quantities that would corrupt the head count.

    Raises:
        InvalidQuantityError: negative quantity, or selling/losing more head
            than the mob has
    """
    if quantity < 0:
        raise InvalidQuantityError(f"Quantity must not be negative (got {quantity})")

    size = mob.get("size") or 0
    if event_type in (SALE, DEATH) and quantity > size:
        verb = "sell" if event_type == SALE else "lose"
        raise InvalidQuantityError(f"Cannot {verb} {quantity} head. Only {size} available.")


def build_purchase_notes(
    notes: str | None = None,
    age: str | None = None,
    avg_weight: str | None = None,
    condition: str | None = None,
) -> str | None:
    """Fold purchase details into one notes line: 'notes | Age: 2 | Avg Weight: 45kg'."""
    parts = [
        notes,
        age and f"Age: {age}",
        avg_weight and f"Avg Weight: {avg_weight}kg",
        condition and f"Condition: {condition}",
    ]
    joined = " | ".join(p for p in parts if p)
    return joined or None


async def get_mob_events(mob_id: str, *, owner_id: str) -> list[MobEvent]:
    """Fetch a mob's event log, oldest first."""
    return await client.select(
        "mob_events",
        {"mob_id": eq(mob_id), "user_id": eq(owner_id)},
        order="event_date.asc",
    )


async def _record(
    mob: Mob,
    event_type: str,
    quantity: int,
    *,
    owner_id: str,
    now: datetime | None = None,
    **details,
) -> Mob | None:
    """Append an event and refresh the cached size. Returns the updated mob, or None on failure."""
    validate_quantity(mob, event_type, quantity)

    if now is None:
        now = utc_now()

    event = {
        "user_id": owner_id,
        "mob_id": mob["id"],
        "event_type": event_type,
        "quantity": quantity,
        "event_date": to_timestamp(now),
        **details,
    }

    try:
        await client.insert("mob_events", event)
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"Error creating {event_type} event: {e}")
        return None

    new_size = apply_event_to_size(mob.get("size") or 0, event_type, quantity)
    if new_size == mob.get("size"):
        return mob

    try:
        await client.update("mobs", {"id": eq(mob["id"]), "user_id": eq(owner_id)}, {"size": new_size})
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"Error updating mob size: {e}")
        return None

    return Mob({**mob, "size": new_size})


async def record_birth(
    mob: Mob,
    quantity: int,
    *,
    owner_id: str,
    notes: str | None = None,
    now: datetime | None = None,
) -> Mob | None:
    """Record newborns joining the mob."""
    return await _record(mob, BIRTH, quantity, owner_id=owner_id, now=now, notes=notes or None)


async def record_sale(
    mob: Mob,
    quantity: int,
    *,
    owner_id: str,
    price_per_head: float | None = None,
    buyer_name: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> Mob | None:
    """Record head sold out of the mob."""
    total_price = price_per_head * quantity if price_per_head else None
    return await _record(
        mob,
        SALE,
        quantity,
        owner_id=owner_id,
        now=now,
        price_per_head=price_per_head,
        total_price=total_price,
        buyer_name=buyer_name or None,
        notes=notes or None,
    )


async def record_loss(
    mob: Mob,
    quantity: int,
    *,
    owner_id: str,
    loss_reason: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> Mob | None:
    """Record deaths or other losses."""
    return await _record(
        mob,
        DEATH,
        quantity,
        owner_id=owner_id,
        now=now,
        loss_reason=loss_reason or None,
        notes=notes or None,
    )


async def record_purchase(
    mob: Mob,
    quantity: int,
    *,
    owner_id: str,
    price_per_head: float | None = None,
    notes: str | None = None,
    age: str | None = None,
    avg_weight: str | None = None,
    condition: str | None = None,
    now: datetime | None = None,
) -> Mob | None:
    """Record bought-in head added to the mob."""
    total_price = price_per_head * quantity if price_per_head else None
    return await _record(
        mob,
        PURCHASE,
        quantity,
        owner_id=owner_id,
        now=now,
        price_per_head=price_per_head,
        total_price=total_price,
        notes=build_purchase_notes(notes, age, avg_weight, condition),
    )


async def record_note(
    mob: Mob,
    event_type: str,
    notes: str,
    *,
    owner_id: str,
    now: datetime | None = None,
) -> Mob | None:
    """Record a treatment or observation; the head count is unchanged."""
    if event_type not in (TREATMENT, OBSERVATION):
        raise ValueError(f"Notes can only be recorded as {TREATMENT} or {OBSERVATION}, not '{event_type}'")
    return await _record(mob, event_type, 0, owner_id=owner_id, now=now, notes=notes)
