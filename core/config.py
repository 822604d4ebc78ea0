"""
Configuration Module
Runtime settings for tool lookup, timeouts and worker pool size.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

COMMAND_TIMEOUT = 30
DEFAULT_WORKERS = 4
DEFAULT_RESOURCES_DIR = Path(__file__).resolve().parent.parent / "resources"

ENV_PREFIX = "DROIDPANEL_"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s%s=%r, using %d", ENV_PREFIX, name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s%s=%r, using %d", ENV_PREFIX, name, raw, default)
        return default
    return value


@dataclass
class Settings:
    """Settings shared by the command layer and the device service."""
    resources_dir: Path = DEFAULT_RESOURCES_DIR
    adb_path: Optional[str] = None
    fastboot_path: Optional[str] = None
    command_timeout: int = COMMAND_TIMEOUT
    max_workers: int = DEFAULT_WORKERS
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from ``DROIDPANEL_*`` environment variables.

        Unset or invalid values keep their defaults.
        """
        resources = os.environ.get(ENV_PREFIX + "RESOURCES_DIR")
        return cls(
            resources_dir=Path(resources).expanduser() if resources else DEFAULT_RESOURCES_DIR,
            adb_path=os.environ.get(ENV_PREFIX + "ADB") or None,
            fastboot_path=os.environ.get(ENV_PREFIX + "FASTBOOT") or None,
            command_timeout=_env_int("TIMEOUT", COMMAND_TIMEOUT),
            max_workers=_env_int("WORKERS", DEFAULT_WORKERS),
            log_level=os.environ.get(ENV_PREFIX + "LOG_LEVEL", "WARNING").upper(),
        )
