"""Resolve whose farm the current user is working on.

Team members (managers, viewers) work on the owner's data set; everyone
else owns their own farm. The resolved owner id is passed explicitly into
every fetch and write.
"""

import httpx

from farmhand.core import client, settings
from farmhand.core.client import BackendAPIError, RetryableError, eq

FARM_MEMBER_ROLES = ("owner", "manager", "viewer")


async def get_farm_owner_id(user_id: str) -> str:
    """
    Effective farm owner for a user.

    A farm_members row with a non-owner role points at the owner's farm.
    With no such row, or if the lookup fails, the user owns their own farm.
    """
    try:
        rows = await client.select(
            "farm_members",
            {"member_user_id": eq(user_id), "role": "neq.owner", "limit": "1"},
        )
    except (BackendAPIError, RetryableError, httpx.HTTPError) as e:
        print(f"  Warning: could not look up farm membership, using own farm: {e}")
        return user_id

    if rows and rows[0].get("farm_owner_id"):
        return rows[0]["farm_owner_id"]
    return user_id


async def resolve_owner_id() -> str:
    """
    Owner id for the configured user.

    FARMHAND_OWNER_ID wins; otherwise FARMHAND_USER_ID is resolved through
    team membership.

    Raises:
        ValueError: If neither is configured
    """
    if settings.farmhand_owner_id:
        return settings.farmhand_owner_id
    if not settings.farmhand_user_id:
        raise ValueError("Set FARMHAND_USER_ID (or FARMHAND_OWNER_ID) to choose a farm")
    return await get_farm_owner_id(settings.farmhand_user_id)
