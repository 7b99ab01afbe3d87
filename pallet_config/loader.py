"""
Settings Loader (``pallet_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into a ``TrackerSettings``.
Keys missing from the file fall back to the schema defaults; keys that are
present must be well-formed.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Present but invalid value  -> ``SettingsError`` naming the field.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from pallet_config.schema import DefaultDepot, TrackerSettings
from pallet_kernel.domain.values import LocationKind
from pallet_kernel.exceptions import SettingsError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        SettingsError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError("<root>", f"expected a mapping, got {type(data).__name__}")
    return data


def _positive_int(field: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise SettingsError(field, f"expected a positive integer, got {value!r}")
    return value


def _non_empty_str(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise SettingsError(field, f"expected a non-empty string, got {value!r}")
    return value.strip()


def _mapping(field: str, value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SettingsError(field, f"expected a mapping, got {type(value).__name__}")
    return value


def parse_location_limits(data: dict[str, Any]) -> dict[LocationKind, int | None]:
    """Parse ``locations.limits``; unknown kinds are rejected, null means no cap."""
    limits = dict(TrackerSettings().location_limits)
    for raw_kind, raw_limit in _mapping("locations.limits", data).items():
        kind = LocationKind.coerce(raw_kind)
        if kind is None:
            raise SettingsError("locations.limits", f"unknown location kind {raw_kind!r}")
        limits[kind] = None if raw_limit is None else _positive_int(
            f"locations.limits.{kind.value}", raw_limit
        )
    return limits


def parse_settings(data: dict[str, Any]) -> TrackerSettings:
    """Parse a settings mapping into ``TrackerSettings``."""
    defaults = TrackerSettings()

    namespace = defaults.namespace
    if "namespace" in data:
        namespace = _non_empty_str("namespace", data["namespace"])

    history_limit = defaults.history_limit
    history = _mapping("history", data.get("history"))
    if "limit" in history:
        history_limit = _positive_int("history.limit", history["limit"])

    location_limits = defaults.location_limits
    locations = _mapping("locations", data.get("locations"))
    if locations.get("limits"):
        location_limits = parse_location_limits(locations["limits"])

    depot = defaults.default_depot
    depot_data = _mapping("default_depot", data.get("default_depot"))
    if depot_data:
        depot = DefaultDepot(
            id=_non_empty_str("default_depot.id", depot_data.get("id", depot.id)),
            name=_non_empty_str("default_depot.name", depot_data.get("name", depot.name)),
        )

    lost_after_days = defaults.lost_after_days
    if "lost_after_days" in data:
        lost_after_days = _positive_int("lost_after_days", data["lost_after_days"])

    database_url = defaults.database_url
    if "database_url" in data:
        database_url = _non_empty_str("database_url", data["database_url"])

    return TrackerSettings(
        namespace=namespace,
        history_limit=history_limit,
        location_limits=location_limits,
        default_depot=depot,
        lost_after_days=lost_after_days,
        database_url=database_url,
    )


def load_settings(path: Path) -> TrackerSettings:
    """Load and parse a settings file."""
    return parse_settings(load_yaml_file(path))
