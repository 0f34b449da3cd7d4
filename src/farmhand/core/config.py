"""Settings for the backend connection, farm selection and display units."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_MARKERS = (".git", "pyproject.toml")

# Optional .env next to pyproject.toml (src/farmhand/core -> project root).
# Without one, settings come from the environment alone.
_ENV_FILE = Path(__file__).resolve().parents[3] / ".env"
_ENV_FILE = _ENV_FILE if _ENV_FILE.exists() else None


@lru_cache
def get_cache_dir() -> Path:
    """Directory for synced farm snapshots: <project root>/.cache, else ./.cache."""
    here = Path(__file__).resolve()
    root = next(
        (p for p in here.parents if any((p / marker).exists() for marker in PROJECT_MARKERS)),
        Path.cwd(),
    )
    cache_dir = root / ".cache"
    cache_dir.mkdir(exist_ok=True)
    return cache_dir


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Hosted backend (Supabase REST endpoint and anon/service key)
    supabase_url: str = "http://localhost:54321"
    supabase_key: str = ""

    # Logged-in user; the effective farm owner is resolved from team membership
    farmhand_user_id: str | None = None

    # Skip the team lookup and load this owner's farm directly
    farmhand_owner_id: str | None = None

    # Display units for CLI output ("metric" = hectares, "imperial" = acres)
    # Note: paddock areas are always stored in square meters
    display_units: Literal["imperial", "metric"] = "metric"


settings = Settings()
