"""Configuration models for scriptupd.

``OptionValues`` holds the user options the update engine consults (and the
``last_update`` timestamp it writes back). ``UpdaterSettings`` holds the
process-level knobs read from the environment.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from scriptupd.logger import get_logger
from scriptupd.utils import get_data_dir

logger = get_logger("config")

# Longest delay a single scheduler timer is allowed to wait (2**31 - 1 ms)
MAX_TIMER = 0x7FFFFFFF / 1000
SECONDS_PER_DAY = 24 * 60 * 60


class OptionValues(BaseModel):
    """User options with their defaults."""

    update_enabled_scripts_only: bool = Field(
        default=True, description="Automatic checks skip disabled scripts"
    )
    notify_updates: bool = Field(default=False, description="Notify about update results")
    notify_updates_global: bool = Field(
        default=False, description="Apply notify_updates to every script, ignoring per-script settings"
    )
    auto_update: float = Field(default=1, ge=0, description="Days between automatic checks, 0 disables")
    last_update: float = Field(default=0, ge=0, description="Epoch seconds of the last automatic check")

    model_config = ConfigDict(validate_assignment=True, extra="ignore")


class UpdaterSettings(BaseModel):
    """Process-level settings of the update engine."""

    concurrency: int = Field(default=2, ge=1, description="Update checks running at once")
    launch_delay: float = Field(default=0.25, ge=0, description="Seconds between two check launches")
    warmup_delay: float = Field(default=20.0, ge=0, description="Seconds before the first automatic check")
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    user_agent: str = Field(default="scriptupd", description="User-Agent header for update requests")
    scripts_dir: Optional[Path] = Field(default=None, description="Directory of installed *.user.js scripts")
    options_file: Path = Field(
        default_factory=lambda: Path(get_data_dir()) / "options.json",
        description="JSON file persisting OptionValues",
    )

    model_config = ConfigDict(frozen=True)


def load_settings(**overrides) -> UpdaterSettings:
    """
    Build settings from ``SCRIPTUPD_*`` environment variables.

    A ``.env`` file in the working directory is loaded first. Keyword
    overrides whose value is not None win over the environment.

    Returns:
        UpdaterSettings: Validated settings
    """
    load_dotenv()
    values: dict[str, object] = {}
    for field_name in UpdaterSettings.model_fields:
        env_value = os.getenv(f"SCRIPTUPD_{field_name.upper()}")
        if env_value:
            values[field_name] = env_value
    values.update({key: value for key, value in overrides.items() if value is not None})
    settings = UpdaterSettings(**values)
    logger.debug(f"Loaded settings: {settings.model_dump()}")
    return settings
