"""Unit conversion utilities using pint.

Paddock areas are stored in square meters (as drawn on the map).
Stocking rates are expressed per hectare.

Display units are controlled by settings.display_units:
- "metric": hectares, DSE/ha
- "imperial": acres, DSE/ac
"""

import pint

from farmhand.core.config import settings

SQUARE_METERS_PER_HECTARE = 10_000

# Create a unit registry (lazily initialized)
_ureg: pint.UnitRegistry | None = None


def get_ureg() -> pint.UnitRegistry:
    """Get the pint unit registry (lazily initialized)."""
    global _ureg
    if _ureg is None:
        _ureg = pint.UnitRegistry()
    return _ureg


# =============================================================================
# Area Conversions
# =============================================================================


def square_meters_to_hectares(area_m2: float) -> float:
    """Convert square meters to hectares."""
    return area_m2 / SQUARE_METERS_PER_HECTARE


def hectares_to_acres(area_ha: float) -> float:
    """Convert hectares to acres."""
    ureg = get_ureg()
    return (area_ha * ureg.hectare).to(ureg.acre).magnitude


def area_to_display(area_m2: float) -> tuple[float, str]:
    """Convert a paddock area to display units.

    Args:
        area_m2: Area in square meters

    Returns:
        Tuple of (value, unit_symbol) in display units
    """
    area_ha = square_meters_to_hectares(area_m2)
    if settings.display_units == "imperial":
        return (hectares_to_acres(area_ha), "ac")
    return (area_ha, "ha")


def format_area(area_m2: float, decimals: int = 1) -> str:
    """Format a paddock area for display.

    Returns:
        Formatted string like "12.4 ha" or "30.6 ac"
    """
    value, unit = area_to_display(area_m2)
    return f"{value:.{decimals}f} {unit}"


def format_stocking_rate(dse_per_ha: float, decimals: int = 1) -> str:
    """Format a stocking rate for display.

    Args:
        dse_per_ha: Dry Sheep Equivalents per hectare

    Returns:
        Formatted string like "8.5 DSE/ha" or "3.4 DSE/ac"
    """
    if settings.display_units == "imperial":
        # Per-acre load is lower by the acres-per-hectare factor
        value = dse_per_ha / hectares_to_acres(1.0)
        return f"{value:.{decimals}f} DSE/ac"
    return f"{dse_per_ha:.{decimals}f} DSE/ha"


def is_imperial() -> bool:
    """Check if display units are imperial."""
    return settings.display_units == "imperial"
