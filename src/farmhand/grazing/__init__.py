"""Grazing model - paddock occupancy, stocking load, mob population, movement."""

from farmhand.grazing.movement import MovePlan, apply_move, move_mob, plan_move
from farmhand.grazing.occupancy import (
    GrazingStatus,
    find_open_event,
    get_days_in_paddock,
    get_days_since_last_grazed,
    get_grazing_status,
)
from farmhand.grazing.population import (
    calculate_age,
    calculate_mob_analytics,
    summarize_losses,
    summarize_sales,
)
from farmhand.grazing.stocking import (
    DEFAULT_DSE_RATE,
    DSE_RATES,
    calculate_dse,
    calculate_paddock_dse,
    calculate_stocking_rate,
    summarize_paddocks,
)

__all__ = [
    "GrazingStatus",
    "get_grazing_status",
    "get_days_since_last_grazed",
    "get_days_in_paddock",
    "find_open_event",
    "DSE_RATES",
    "DEFAULT_DSE_RATE",
    "calculate_dse",
    "calculate_paddock_dse",
    "calculate_stocking_rate",
    "summarize_paddocks",
    "calculate_mob_analytics",
    "calculate_age",
    "summarize_sales",
    "summarize_losses",
    "MovePlan",
    "plan_move",
    "apply_move",
    "move_mob",
]
