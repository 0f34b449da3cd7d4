"""Farm grazing tools.

This package tracks paddock grazing, stocking rates and mob populations
for a farm whose data lives in a hosted backend.

Subpackages:
- farmhand.core: Configuration, backend client, units
- farmhand.data: Paddocks, mobs, mob events, team ownership, local cache
- farmhand.grazing: Occupancy, stocking rate, population history, mob moves
- farmhand.cli: Command-line tools
"""

# Re-export common items for convenience
from farmhand.core import settings
from farmhand.grazing import (
    apply_move,
    calculate_dse,
    calculate_mob_analytics,
    calculate_stocking_rate,
    get_days_in_paddock,
    get_grazing_status,
    move_mob,
)

__all__ = [
    "settings",
    "get_grazing_status",
    "get_days_in_paddock",
    "calculate_dse",
    "calculate_stocking_rate",
    "calculate_mob_analytics",
    "apply_move",
    "move_mob",
]

__version__ = "0.1.0"
