"""
Moving mobs between paddocks.

A mob is in at most one paddock at a time: it has at most one open grazing
event, and when it has one, that event's paddock is the mob's
`current_paddock_id`. A move closes the open event, opens a new one in the
destination and repoints the mob, as a single transition.

`plan_move`/`apply_move` work on in-memory snapshots. `move_mob` performs
the same transition against the backend, undoing its earlier writes if a
later one fails or if another client moved the mob first.
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime

import httpx

from farmhand.core import client
from farmhand.core.client import BackendAPIError, RetryableError, eq, in_, is_null
from farmhand.data.models import GrazingEvent, Mob, is_open, parse_timestamp, to_timestamp, utc_now

SECONDS_PER_DAY = 60 * 60 * 24


@dataclass
class MovePlan:
    """Writes needed to move one mob."""

    mob_id: str
    old_paddock_id: str | None
    new_paddock_id: str | None
    moved_at: str
    close_event_ids: list[str] = field(default_factory=list)
    open_event: GrazingEvent | None = None
    # Captured before the old event is closed; unrecoverable afterwards
    days_in_previous_paddock: int = 0


def plan_move(
    mob: Mob,
    grazing_events: list[GrazingEvent],
    new_paddock_id: str | None,
    now: datetime | None = None,
) -> MovePlan:
    """
    Work out the writes for moving `mob` to `new_paddock_id`.

    Every open event the mob has is closed, so history that already holds
    more than one is repaired by the move. Passing None as the destination
    takes the mob out of all paddocks.
    """
    if now is None:
        now = utc_now()
    moved_at = to_timestamp(now)

    open_events = [e for e in grazing_events if e.get("mob_id") == mob["id"] and is_open(e)]

    days_in_previous = 0
    if open_events:
        earliest = min(open_events, key=lambda e: parse_timestamp(e["moved_in_at"]))
        elapsed = abs((now - parse_timestamp(earliest["moved_in_at"])).total_seconds())
        days_in_previous = math.ceil(elapsed / SECONDS_PER_DAY)

    open_event = None
    if new_paddock_id:
        open_event = GrazingEvent(
            mob_id=mob["id"],
            paddock_id=new_paddock_id,
            moved_in_at=moved_at,
            moved_out_at=None,
        )
        if mob.get("user_id"):
            open_event["user_id"] = mob["user_id"]

    return MovePlan(
        mob_id=mob["id"],
        old_paddock_id=mob.get("current_paddock_id"),
        new_paddock_id=new_paddock_id,
        moved_at=moved_at,
        close_event_ids=[e["id"] for e in open_events],
        open_event=open_event,
        days_in_previous_paddock=days_in_previous,
    )


def apply_move(
    mob: Mob,
    grazing_events: list[GrazingEvent],
    new_paddock_id: str | None,
    now: datetime | None = None,
) -> tuple[Mob, list[GrazingEvent], MovePlan]:
    """
    Move a mob within in-memory snapshots.

    Inputs are left untouched; returns the updated mob, the updated event
    list and the plan that was applied.
    """
    plan = plan_move(mob, grazing_events, new_paddock_id, now=now)
    closing = set(plan.close_event_ids)

    events: list[GrazingEvent] = []
    for event in grazing_events:
        if event.get("mob_id") == plan.mob_id and event.get("id") in closing:
            event = GrazingEvent({**event, "moved_out_at": plan.moved_at})
        events.append(event)

    if plan.open_event is not None:
        events.append(GrazingEvent({**plan.open_event, "id": str(uuid.uuid4())}))

    moved = Mob({**mob, "current_paddock_id": plan.new_paddock_id})
    return moved, events, plan


async def _undo_move(closed: list[GrazingEvent], opened: GrazingEvent | None) -> None:
    """Reopen closed events and drop the new one after a failed move."""
    try:
        if opened is not None and opened.get("id"):
            await client.delete("grazing_events", {"id": eq(opened["id"])})
        if closed:
            await client.update(
                "grazing_events",
                {"id": in_([e["id"] for e in closed])},
                {"moved_out_at": None},
            )
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"  Warning: could not undo partial move: {e}")


async def move_mob(
    mob_id: str,
    old_paddock_id: str | None,
    new_paddock_id: str | None,
    *,
    owner_id: str,
    now: datetime | None = None,
) -> bool:
    """
    Move a mob to a new paddock on the backend.

    1. Close the mob's open grazing event(s). None open is a no-op.
    2. Open a grazing event in the new paddock (unless moving out).
    3. Point the mob at the new paddock, only if it still points at
       `old_paddock_id`. If another client moved it first, nothing changes.

    Work out days in the previous paddock before calling this; the open
    event is closed here.

    Returns:
        True if the mob was moved, False if any step failed (earlier writes
        are undone)
    """
    if now is None:
        now = utc_now()
    moved_at = to_timestamp(now)

    closed: list[GrazingEvent] = []
    opened: GrazingEvent | None = None

    try:
        closed = await client.update(
            "grazing_events",
            {"user_id": eq(owner_id), "mob_id": eq(mob_id), "moved_out_at": is_null()},
            {"moved_out_at": moved_at},
        )

        if new_paddock_id:
            rows = await client.insert(
                "grazing_events",
                {
                    "user_id": owner_id,
                    "mob_id": mob_id,
                    "paddock_id": new_paddock_id,
                    "moved_in_at": moved_at,
                },
            )
            opened = rows[0] if rows else None

        guard = eq(old_paddock_id) if old_paddock_id else is_null()
        updated = await client.update(
            "mobs",
            {"id": eq(mob_id), "user_id": eq(owner_id), "current_paddock_id": guard},
            {"current_paddock_id": new_paddock_id},
        )
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"Error moving mob {mob_id}: {e}")
        await _undo_move(closed, opened)
        return False

    if not updated:
        print(f"Mob {mob_id} is no longer in the expected paddock - move abandoned")
        await _undo_move(closed, opened)
        return False

    return True
