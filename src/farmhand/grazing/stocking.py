"""
Stocking load in Dry Sheep Equivalents (DSE).

One DSE is the feed a 50 kg dry sheep needs to hold its weight. Converting
every mob to DSE lets cattle, sheep and horses share one measure of grazing
pressure, and dividing by paddock area gives the stocking rate (DSE/ha).
"""

from datetime import datetime
from typing import TypedDict

from farmhand.core.units import square_meters_to_hectares
from farmhand.data.models import GrazingEvent, Mob, Paddock, utc_now
from farmhand.grazing.occupancy import get_grazing_status

# DSE multiplier per head by livestock type
DSE_RATES = {
    "sheep": 1.0,
    "cattle": 8.0,
    "horse": 10.0,
    "goat": 0.8,
    "lamb": 0.6,
    "calf": 4.0,
}

# Unknown livestock types count as one dry sheep per head
DEFAULT_DSE_RATE = 1.0


class PaddockSummary(TypedDict):
    """Grazing and stocking picture for one paddock."""

    paddock_id: str
    paddock_name: str
    paddock_type: str
    area_m2: float
    area_ha: float
    status: str
    days: int
    mob_count: int
    total_dse: float
    stocking_rate: float  # DSE/ha


def get_dse_rate(livestock_type: str) -> float:
    return DSE_RATES.get((livestock_type or "").lower(), DEFAULT_DSE_RATE)


def calculate_dse(livestock_type: str, size: int) -> float:
    """DSE for a mob of `size` head."""
    return get_dse_rate(livestock_type) * size


def calculate_paddock_dse(paddock_id: str, mobs: list[Mob]) -> float:
    """
    Total DSE of every mob whose current paddock is this one.

    Mob status is not checked: an archived mob still pointing at the
    paddock is counted.
    """
    return sum(
        calculate_dse(mob.get("livestock_type", ""), mob.get("size") or 0)
        for mob in mobs
        if mob.get("current_paddock_id") == paddock_id
    )


def calculate_stocking_rate(paddock_id: str, paddock_area: float, mobs: list[Mob]) -> float:
    """
    Stocking rate in DSE per hectare.

    Args:
        paddock_id: Paddock to total
        paddock_area: Paddock area in square meters
        mobs: All mobs for the farm

    Returns:
        DSE/ha, or 0 for paddocks without a positive area
    """
    area_ha = square_meters_to_hectares(paddock_area or 0)
    if area_ha <= 0:
        return 0
    return calculate_paddock_dse(paddock_id, mobs) / area_ha


def summarize_paddocks(
    paddocks: list[Paddock],
    mobs: list[Mob],
    grazing_events: list[GrazingEvent],
    now: datetime | None = None,
) -> list[PaddockSummary]:
    """Combine occupancy and stocking load for every paddock."""
    if now is None:
        now = utc_now()

    result: list[PaddockSummary] = []
    for paddock in paddocks:
        pid = paddock["id"]
        area = paddock.get("area") or 0
        status = get_grazing_status(pid, mobs, grazing_events, now=now)

        result.append(
            PaddockSummary(
                paddock_id=pid,
                paddock_name=paddock.get("name", "Unknown"),
                paddock_type=paddock.get("type") or "other",
                area_m2=area,
                area_ha=round(square_meters_to_hectares(area), 2),
                status=status["status"],
                days=status["days"],
                mob_count=status["mob_count"],
                total_dse=round(calculate_paddock_dse(pid, mobs), 1),
                stocking_rate=round(calculate_stocking_rate(pid, area, mobs), 1),
            )
        )

    return result
