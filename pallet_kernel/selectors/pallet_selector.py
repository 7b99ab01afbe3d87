"""
Module: pallet_kernel.selectors.pallet_selector
Responsibility: Read-only pallet views: the lost-pallet report and the
    dashboard summary.
Architecture position: Kernel > Selectors. Reads through the registries and
    the scan log; never writes. ``now`` is always passed in, so results are
    reproducible under a DeterministicClock.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime

from pallet_kernel.domain.records import Pallet, ScanEvent
from pallet_kernel.domain.sightings import days_since_seen, is_lost
from pallet_kernel.domain.values import LocationKind
from pallet_kernel.services.location_registry import LocationRegistry
from pallet_kernel.services.pallet_registry import PalletRegistry
from pallet_kernel.services.scan_log import ScanLog

UNSPECIFIED_TYPE = "Unspecified"


@dataclass(frozen=True)
class LostPalletLine:
    """A lost pallet with where it was last declared and how long ago it was seen."""

    pallet: Pallet
    last_location_name: str
    days_since_seen: int | None


@dataclass(frozen=True)
class DashboardSummary:
    drivers: int
    shops: int
    depots: int
    pallets: int
    scans: int
    lost_pallets: int
    type_distribution: dict[str, int]
    recent_scans: list[ScanEvent]


class PalletSelector:
    """Read-only pallet queries."""

    def __init__(
        self,
        pallets: PalletRegistry,
        locations: LocationRegistry,
        scan_log: ScanLog,
        lost_after_days: int = 30,
    ):
        self.pallets = pallets
        self.locations = locations
        self.scan_log = scan_log
        self.lost_after_days = lost_after_days

    def lost_pallets(self, now: datetime, min_days: int | None = None) -> list[LostPalletLine]:
        """
        Pallets not seen for more than ``min_days`` days (never-seen included).

        Args:
            now: Reference time.
            min_days: Threshold; defaults to the configured lost_after_days.

        Returns:
            Lines ordered never-seen first, then most stale first.
        """
        threshold = self.lost_after_days if min_days is None else min_days
        names = self.locations.name_index()
        lines = [
            LostPalletLine(
                pallet=p,
                last_location_name=names.get(p.last_location, "") if p.last_location else "",
                days_since_seen=days_since_seen(p, now),
            )
            for p in self.pallets.list()
            if is_lost(p, now, threshold)
        ]
        lines.sort(
            key=lambda line: (
                line.days_since_seen is not None,
                -(line.days_since_seen or 0),
                line.pallet.code.lower(),
            )
        )
        return lines

    def summary(self, now: datetime, recent: int = 5) -> DashboardSummary:
        """Counts and distributions for the dashboard."""
        pallets = self.pallets.list()
        types = Counter((p.type or "").strip() or UNSPECIFIED_TYPE for p in pallets)
        return DashboardSummary(
            drivers=self.locations.count(LocationKind.DRIVER),
            shops=self.locations.count(LocationKind.SHOP),
            depots=self.locations.count(LocationKind.DEPOT),
            pallets=len(pallets),
            scans=self.scan_log.count(),
            lost_pallets=sum(1 for p in pallets if is_lost(p, now, self.lost_after_days)),
            type_distribution=dict(types),
            recent_scans=self.scan_log.recent(recent),
        )
