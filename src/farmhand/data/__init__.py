"""Data modules - paddocks, mobs, mob events, team ownership, local cache."""

from farmhand.data import models
from farmhand.data.cache import load_farm_snapshot, save_farm_snapshot, sync_farm
from farmhand.data.mob_events import (
    InvalidQuantityError,
    get_mob_events,
    record_birth,
    record_loss,
    record_note,
    record_purchase,
    record_sale,
)
from farmhand.data.mobs import (
    archive_mob,
    create_mob,
    delete_mob,
    get_grazing_events,
    get_mobs,
    update_mob,
)
from farmhand.data.paddocks import (
    calculate_area,
    calculate_centroid,
    create_paddock,
    delete_paddock,
    get_paddock_name,
    get_paddocks,
    update_paddock,
)
from farmhand.data.team import get_farm_owner_id, resolve_owner_id

__all__ = [
    "models",
    "get_paddocks",
    "create_paddock",
    "update_paddock",
    "delete_paddock",
    "calculate_area",
    "calculate_centroid",
    "get_paddock_name",
    "get_mobs",
    "get_grazing_events",
    "create_mob",
    "update_mob",
    "archive_mob",
    "delete_mob",
    "get_mob_events",
    "record_birth",
    "record_sale",
    "record_loss",
    "record_purchase",
    "record_note",
    "InvalidQuantityError",
    "get_farm_owner_id",
    "resolve_owner_id",
    "load_farm_snapshot",
    "save_farm_snapshot",
    "sync_farm",
]
