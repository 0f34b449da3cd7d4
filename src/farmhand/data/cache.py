"""Local snapshot of farm data for offline analysis.

Downloads paddocks, mobs (archived included) and grazing events to
.cache/farm.json so the grazing calculators can run without the backend.
"""

import json
from pathlib import Path

from farmhand.core import get_cache_dir
from farmhand.data.mobs import get_grazing_events, get_mobs
from farmhand.data.models import utc_now
from farmhand.data.paddocks import get_paddocks

DEFAULT_CACHE_FILE = "farm.json"


def _cache_path(cache_path: Path | None) -> Path:
    if cache_path is None:
        cache_path = get_cache_dir() / DEFAULT_CACHE_FILE
    return cache_path


def save_farm_snapshot(snapshot: dict, cache_path: Path | None = None) -> Path:
    """Write a snapshot to the cache and return its path."""
    path = _cache_path(cache_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(snapshot, f, indent=2)
    return path


def load_farm_snapshot(cache_path: Path | None = None) -> dict:
    """
    Load the cached snapshot.

    Raises:
        FileNotFoundError: If `farmhand sync` has not been run yet
    """
    path = _cache_path(cache_path)
    with open(path) as f:
        data = json.load(f)

    return {
        "owner_id": data.get("owner_id"),
        "synced_at": data.get("synced_at"),
        "paddocks": data.get("paddocks", []),
        "mobs": data.get("mobs", []),
        "grazing_events": data.get("grazing_events", []),
    }


async def fetch_farm_snapshot(owner_id: str) -> dict:
    """Fetch everything the grazing calculators need from the backend."""
    paddocks = await get_paddocks(owner_id)
    mobs = await get_mobs(owner_id, include_archived=True)
    grazing_events = await get_grazing_events(owner_id)

    return {
        "owner_id": owner_id,
        "synced_at": utc_now().isoformat(),
        "paddocks": paddocks,
        "mobs": mobs,
        "grazing_events": grazing_events,
    }


async def sync_farm(owner_id: str, cache_path: Path | None = None) -> dict:
    """Download a fresh snapshot and save it to the cache."""
    snapshot = await fetch_farm_snapshot(owner_id)
    path = save_farm_snapshot(snapshot, cache_path)
    print(
        f"Cached {len(snapshot['paddocks'])} paddocks, {len(snapshot['mobs'])} mobs, "
        f"{len(snapshot['grazing_events'])} grazing events to {path}"
    )
    return snapshot
