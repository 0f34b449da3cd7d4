"""Paddock records and geometry helpers."""

import httpx

from farmhand.core import client
from farmhand.core.client import BackendAPIError, RetryableError, eq
from farmhand.data.models import PADDOCK_TYPES, Paddock

# Rough meters per degree, used to turn lon/lat polygons into square meters
METERS_PER_DEGREE = 111320


def calculate_area(coordinates: list[list[float]]) -> float:
    """
    Area of a closed lon/lat ring in square meters.

    Shoelace formula in degrees, scaled by a flat meters-per-degree factor.
    Good enough for paddock-sized polygons; the last point must repeat the first.
    """
    area = 0.0
    for p1, p2 in zip(coordinates, coordinates[1:]):
        area += (p2[0] - p1[0]) * (p2[1] + p1[1])
    return abs(area / 2) * METERS_PER_DEGREE * METERS_PER_DEGREE


def calculate_centroid(coordinates: list[list[float]]) -> tuple[float, float]:
    """Mean of a closed ring's vertices as (longitude, latitude)."""
    points = coordinates[:-1] if len(coordinates) > 1 else coordinates
    if not points:
        return (0.0, 0.0)
    x = sum(p[0] for p in points)
    y = sum(p[1] for p in points)
    return (x / len(points), y / len(points))


def polygon_area(geometry: dict) -> float:
    """Area in square meters of a GeoJSON Polygon (outer ring only)."""
    if (geometry or {}).get("type") != "Polygon":
        return 0.0
    rings = geometry.get("coordinates") or []
    return calculate_area(rings[0]) if rings else 0.0


def get_paddock_name(paddock_id: str | None, paddocks: list[Paddock]) -> str:
    if not paddock_id:
        return "Not in paddock"
    paddock = next((p for p in paddocks if p.get("id") == paddock_id), None)
    return paddock["name"] if paddock else "Unknown paddock"


async def get_paddocks(owner_id: str) -> list[Paddock]:
    """Fetch all paddocks for the farm owner."""
    return await client.select("paddocks", {"user_id": eq(owner_id)})


async def create_paddock(
    owner_id: str,
    name: str,
    geometry: dict,
    color: str,
    paddock_type: str = "pasture",
    area: float | None = None,
    tree_species: str | None = None,
) -> Paddock | None:
    """
    Create a paddock from a drawn polygon.

    Area is worked out from the geometry unless given. Returns the stored
    paddock, or None if the backend rejected it.
    """
    if paddock_type not in PADDOCK_TYPES:
        raise ValueError(f"Unknown paddock type '{paddock_type}'. Expected one of: {', '.join(PADDOCK_TYPES)}")

    if area is None:
        area = polygon_area(geometry)
    if area < 0:
        raise ValueError("Paddock area cannot be negative")

    row = {
        "user_id": owner_id,
        "name": name,
        "geometry": geometry,
        "area": area,
        "color": color,
        "type": paddock_type,
        "tree_species": tree_species,
    }
    try:
        rows = await client.insert("paddocks", row)
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"Error creating paddock: {e}")
        return None
    return rows[0] if rows else None


async def update_paddock(paddock_id: str, updates: dict, *, owner_id: str) -> bool:
    """
    Update paddock fields. A new geometry also refreshes the stored area.
    """
    if "geometry" in updates and "area" not in updates:
        updates = {**updates, "area": polygon_area(updates["geometry"])}

    try:
        await client.update("paddocks", {"id": eq(paddock_id), "user_id": eq(owner_id)}, updates)
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"Error updating paddock: {e}")
        return False
    return True


async def delete_paddock(paddock_id: str, *, owner_id: str) -> bool:
    """
    Delete a paddock.

    Grazing events and tasks keep their paddock ids; readers treat a missing
    paddock as "Unknown paddock".
    """
    try:
        await client.delete("paddocks", {"id": eq(paddock_id), "user_id": eq(owner_id)})
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"Error deleting paddock: {e}")
        return False
    return True
