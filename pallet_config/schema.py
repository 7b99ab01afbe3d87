"""
Tracker settings schema.

Frozen dataclasses parsed from YAML by ``pallet_config.loader``. The
runtime only ever sees a ``TrackerSettings`` instance; YAML is never read
outside the loader.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pallet_kernel.domain.values import LocationKind


@dataclass(frozen=True)
class DefaultDepot:
    """The synthetic origin assumed for pallets with no known location."""

    id: str = "dep_default"
    name: str = "Main Depot"


@dataclass(frozen=True)
class TrackerSettings:
    """All tunables of the tracker."""

    namespace: str = "pt"
    history_limit: int = 2000
    location_limits: dict[LocationKind, int | None] = field(
        default_factory=lambda: {
            LocationKind.DRIVER: 10,
            LocationKind.SHOP: 100,
            LocationKind.DEPOT: None,
        }
    )
    default_depot: DefaultDepot = field(default_factory=DefaultDepot)
    lost_after_days: int = 30
    database_url: str = "sqlite:///pallet_tracker.db"

    def limit_for(self, kind: LocationKind) -> int | None:
        """Catalog cap for a location kind; None means unlimited."""
        return self.location_limits.get(kind)
