"""
Mob population history reconstructed from the mob event log.

Only the mob's current head count is stored on the mob itself. The event
log (births, sales, deaths, purchases, ...) is the audit trail, so the
size history is rebuilt by working back from the current size to the
starting size and then replaying the log forward.

Purchases are kept for cost tracking but are not replayed into the size
series. This matches how the history has always been charted; see
DESIGN.md before changing it.
"""

import math
from datetime import datetime
from typing import TypedDict

from farmhand.data.models import (
    BIRTH,
    DEATH,
    PURCHASE,
    SALE,
    Mob,
    MobEvent,
    parse_timestamp,
    to_timestamp,
    utc_now,
)

SECONDS_PER_DAY = 60 * 60 * 24
DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30

INITIAL_EVENT = "Initial"


class SizePoint(TypedDict):
    date: str | None
    size: int
    event: str


class MobAnalytics(TypedDict):
    """Population summary for one mob."""

    total_births: int
    total_sales: int
    total_losses: int
    birth_rate: float  # births per 100 head at the start
    initial_size: int
    size_over_time: list[SizePoint]


class TradeSummary(TypedDict):
    head: int
    total_value: float
    average_per_head: float | None


class SalesSummary(TypedDict):
    sales: TradeSummary
    purchases: TradeSummary


def _empty_analytics() -> MobAnalytics:
    return MobAnalytics(
        total_births=0,
        total_sales=0,
        total_losses=0,
        birth_rate=0,
        initial_size=0,
        size_over_time=[],
    )


def sort_events(mob_events: list[MobEvent]) -> list[MobEvent]:
    """Order events by event_date; undated events go last, ties keep log order."""
    dated = [e for e in mob_events if e.get("event_date")]
    undated = [e for e in mob_events if not e.get("event_date")]
    return sorted(dated, key=lambda e: parse_timestamp(e["event_date"])) + undated


def _total(mob_events: list[MobEvent], event_type: str) -> int:
    return sum(e.get("quantity") or 0 for e in mob_events if e.get("event_type") == event_type)


def calculate_mob_analytics(mob: Mob | None, mob_events: list[MobEvent], now: datetime | None = None) -> MobAnalytics:
    """
    Rebuild the mob's size over time and headline totals.

    initial size = current size - (births - sales - losses)

    The series starts at the mob's creation with the initial size and gets
    one point per event. Display sizes are floored at 0; the running total
    itself is not clamped, so a bad record does not skew later points.
    """
    if mob is None or not mob_events:
        return _empty_analytics()

    if now is None:
        now = utc_now()

    events = sort_events(mob_events)

    total_births = _total(events, BIRTH)
    total_sales = _total(events, SALE)
    total_losses = _total(events, DEATH)

    current_size = mob.get("size") or 0
    initial_size = current_size - (total_births - total_sales - total_losses)

    running_size = initial_size
    size_over_time = [
        SizePoint(
            date=mob.get("created_at") or to_timestamp(now),
            size=max(0, running_size),
            event=INITIAL_EVENT,
        )
    ]

    for event in events:
        event_type = event.get("event_type")
        quantity = event.get("quantity") or 0

        if event_type == BIRTH:
            running_size += quantity
        elif event_type in (SALE, DEATH):
            running_size -= quantity

        size_over_time.append(SizePoint(date=event.get("event_date"), size=max(0, running_size), event=event_type))

    birth_rate = (total_births / initial_size) * 100 if initial_size > 0 else 0

    return MobAnalytics(
        total_births=total_births,
        total_sales=total_sales,
        total_losses=total_losses,
        birth_rate=birth_rate,
        initial_size=initial_size,
        size_over_time=size_over_time,
    )


def _format_years_months(years: int, months: int) -> str:
    return f"{years}y {months}m" if months > 0 else f"{years} years"


def calculate_age(
    birth_date: str | datetime | None,
    purchase_date: str | datetime | None,
    age_at_purchase: float | None,
    now: datetime | None = None,
) -> str:
    """
    Human readable age of an animal.

    Bought-in animals: age at purchase (years) plus time since purchase.
    Home-bred animals: time since birth, in days, months, or years/months.
    """
    if now is None:
        now = utc_now()

    if purchase_date and age_at_purchase is not None:
        elapsed = abs((now - parse_timestamp(purchase_date)).total_seconds())
        current_age = age_at_purchase + elapsed / (SECONDS_PER_DAY * DAYS_PER_YEAR)

        years = math.floor(current_age)
        months = math.floor((current_age % 1) * 12)

        if years == 0:
            return f"{months} months"
        return _format_years_months(years, months)

    if birth_date:
        elapsed = abs((now - parse_timestamp(birth_date)).total_seconds())
        days = math.ceil(elapsed / SECONDS_PER_DAY)

        if days < DAYS_PER_MONTH:
            return f"{days} days"
        if days < DAYS_PER_YEAR:
            return f"{days // DAYS_PER_MONTH} months"

        return _format_years_months(days // DAYS_PER_YEAR, (days % DAYS_PER_YEAR) // DAYS_PER_MONTH)

    return "Unknown"


def _trade_summary(events: list[MobEvent]) -> TradeSummary:
    head = 0
    total_value = 0.0
    priced_head = 0

    for event in events:
        quantity = event.get("quantity") or 0
        head += quantity

        value = event.get("total_price")
        if value is None and event.get("price_per_head") is not None:
            value = event["price_per_head"] * quantity
        if value is not None:
            total_value += value
            priced_head += quantity

    return TradeSummary(
        head=head,
        total_value=round(total_value, 2),
        average_per_head=round(total_value / priced_head, 2) if priced_head else None,
    )


def summarize_sales(mob_events: list[MobEvent]) -> SalesSummary:
    """Head and dollars in and out: sales revenue and purchase cost."""
    return SalesSummary(
        sales=_trade_summary([e for e in mob_events if e.get("event_type") == SALE]),
        purchases=_trade_summary([e for e in mob_events if e.get("event_type") == PURCHASE]),
    )


def summarize_losses(mob_events: list[MobEvent]) -> dict[str, int]:
    """Head lost grouped by loss reason."""
    losses: dict[str, int] = {}
    for event in mob_events:
        if event.get("event_type") != DEATH:
            continue
        reason = event.get("loss_reason") or "unspecified"
        losses[reason] = losses.get(reason, 0) + (event.get("quantity") or 0)
    return losses
