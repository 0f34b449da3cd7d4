"""
Paddock occupancy derived from the grazing event log.

A grazing event is an interval: a mob moved into a paddock at `moved_in_at`
and, once it leaves, `moved_out_at` is set. From those intervals we work
out whether a paddock is being grazed right now, how long it has been
resting, or whether it has never been grazed at all.

All functions are pure and take an optional `now` so the clock can be pinned.
Inconsistent history (several open events, open events with no occupying
mob) degrades to a sensible answer rather than raising.
"""

import math
from datetime import datetime
from typing import Literal, TypedDict

from farmhand.data.models import (
    GrazingEvent,
    Mob,
    is_active,
    is_open,
    parse_timestamp,
    utc_now,
)

SECONDS_PER_DAY = 60 * 60 * 24


class GrazingStatus(TypedDict):
    """Occupancy state of one paddock."""

    status: Literal["grazing", "resting", "never"]
    days: int
    mob_count: int


def _whole_days_since(timestamp: str | datetime, now: datetime) -> int:
    """Floor of elapsed days."""
    elapsed = now - parse_timestamp(timestamp)
    return math.floor(elapsed.total_seconds() / SECONDS_PER_DAY)


def _earliest_move_in(events: list[GrazingEvent]) -> GrazingEvent | None:
    if not events:
        return None
    return min(events, key=lambda e: parse_timestamp(e["moved_in_at"]))


def _latest_move_out(events: list[GrazingEvent]) -> GrazingEvent | None:
    closed = [e for e in events if not is_open(e)]
    if not closed:
        return None
    return max(closed, key=lambda e: parse_timestamp(e["moved_out_at"]))


def get_occupying_mobs(paddock_id: str, mobs: list[Mob]) -> list[Mob]:
    """Active mobs with head in them whose current paddock is this one."""
    return [
        mob
        for mob in mobs
        if mob.get("current_paddock_id") == paddock_id and is_active(mob) and (mob.get("size") or 0) > 0
    ]


def find_open_event(mob_id: str, grazing_events: list[GrazingEvent]) -> GrazingEvent | None:
    """
    Find the mob's open grazing event.

    There should be at most one. If history holds several, the earliest
    move-in wins so the answer is stable.
    """
    return _earliest_move_in([e for e in grazing_events if e.get("mob_id") == mob_id and is_open(e)])


def get_grazing_status(
    paddock_id: str,
    mobs: list[Mob],
    grazing_events: list[GrazingEvent],
    now: datetime | None = None,
) -> GrazingStatus:
    """
    Work out whether a paddock is grazing, resting, or has never been grazed.

    Occupancy comes from the mobs themselves (active, non-empty, pointing at
    the paddock). The open grazing events only supply the start date; if none
    is found the grazing spell is treated as starting today.
    """
    if now is None:
        now = utc_now()

    paddock_events = [e for e in grazing_events if e.get("paddock_id") == paddock_id]
    occupying = get_occupying_mobs(paddock_id, mobs)

    if occupying:
        first_in = _earliest_move_in([e for e in paddock_events if is_open(e)])
        days = _whole_days_since(first_in["moved_in_at"], now) if first_in else 0
        return GrazingStatus(status="grazing", days=days, mob_count=len(occupying))

    if not paddock_events:
        return GrazingStatus(status="never", days=0, mob_count=0)

    last_out = _latest_move_out(paddock_events)
    if last_out is None:
        # Only open events and nobody actually in the paddock
        return GrazingStatus(status="never", days=0, mob_count=0)

    return GrazingStatus(
        status="resting",
        days=_whole_days_since(last_out["moved_out_at"], now),
        mob_count=0,
    )


def get_days_since_last_grazed(
    paddock_id: str,
    grazing_events: list[GrazingEvent],
    now: datetime | None = None,
) -> int | None:
    """
    Days since a mob last left the paddock.

    Returns None if the paddock was never grazed, 0 if it is being grazed
    for the first time (open event, nothing closed yet).
    """
    if now is None:
        now = utc_now()

    paddock_events = [e for e in grazing_events if e.get("paddock_id") == paddock_id]
    if not paddock_events:
        return None

    last_out = _latest_move_out(paddock_events)
    if last_out is None:
        if any(e.get("moved_in_at") and is_open(e) for e in paddock_events):
            return 0
        return None

    return _whole_days_since(last_out["moved_out_at"], now)


def get_days_in_paddock(
    mob_id: str,
    grazing_events: list[GrazingEvent],
    now: datetime | None = None,
) -> int | None:
    """
    Days the mob has spent in its current paddock, rounded up.

    Partial days count as a full day; a mob moved in this instant has 0.
    Returns None if the mob has no open grazing event.
    """
    if now is None:
        now = utc_now()

    current = find_open_event(mob_id, grazing_events)
    if current is None:
        return None

    elapsed = abs((now - parse_timestamp(current["moved_in_at"])).total_seconds())
    return math.ceil(elapsed / SECONDS_PER_DAY)
