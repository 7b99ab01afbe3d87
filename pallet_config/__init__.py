"""
pallet_config -- single public entrypoint for tracker settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``. No other component reads settings files or
    environment variables directly.

Resolution order:
    1. An explicit ``path`` argument.
    2. The file named by the ``PALLET_TRACKER_CONFIG`` environment variable.
    3. The packaged ``defaults.yaml``.

Failure modes:
    - ``FileNotFoundError`` -- the chosen file does not exist.
    - ``SettingsError`` -- a value in the file is malformed.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pallet_config.loader import load_settings, parse_settings
from pallet_config.schema import DefaultDepot, TrackerSettings

_logger = logging.getLogger("pallet_kernel.config")

CONFIG_ENV_VAR = "PALLET_TRACKER_CONFIG"

_DEFAULTS_FILE = Path(__file__).parent / "defaults.yaml"


def get_active_settings(path: Path | str | None = None) -> TrackerSettings:
    """
    Load the active tracker settings.

    Args:
        path: Optional settings file overriding the environment and defaults.

    Returns:
        Parsed TrackerSettings.
    """
    if path is not None:
        source = Path(path)
    elif os.environ.get(CONFIG_ENV_VAR):
        source = Path(os.environ[CONFIG_ENV_VAR])
    else:
        source = _DEFAULTS_FILE

    settings = load_settings(source)
    _logger.info(
        "settings_loaded",
        extra={
            "source": str(source),
            "namespace": settings.namespace,
            "history_limit": settings.history_limit,
            "lost_after_days": settings.lost_after_days,
        },
    )
    return settings


__all__ = [
    "CONFIG_ENV_VAR",
    "DefaultDepot",
    "TrackerSettings",
    "get_active_settings",
    "load_settings",
    "parse_settings",
]
