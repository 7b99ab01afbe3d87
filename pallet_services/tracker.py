"""
pallet_services.tracker -- Central wiring for the pallet tracker.

Responsibility:
    Creates every kernel service exactly once and wires them together over
    a single KeyValueStore and Clock. No kernel service constructs another
    service; all wiring is visible in ``PalletTracker.__init__``.

Architecture position:
    Services -- composition root above pallet_kernel and pallet_config.
    The kernel never imports this package or pallet_config; settings reach
    kernel services as plain constructor arguments.

Usage:
    from pallet_services import PalletTracker

    tracker = PalletTracker.in_memory()
    tracker.locations.add(LocationKind.SHOP, "Shop A")
    tracker.scans.move_via_scan("PAL-1", "EUR/EPAL", 5, shop_ref)
    tracker.stock_view.grouped_stock()
"""

from __future__ import annotations

from pathlib import Path

from pallet_config import TrackerSettings, get_active_settings
from pallet_kernel.db.collections import JsonCollection, JsonSlot
from pallet_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from pallet_kernel.db.kv import InMemoryKeyValueStore, KeyValueStore
from pallet_kernel.db.sql_store import SqlKeyValueStore
from pallet_kernel.domain.clock import Clock, SystemClock
from pallet_kernel.domain.values import LocationKind
from pallet_kernel.logging_config import get_logger
from pallet_kernel.selectors.pallet_selector import PalletSelector
from pallet_kernel.selectors.stock_selector import StockSelector
from pallet_kernel.services.location_registry import LocationCatalog, LocationRegistry
from pallet_kernel.services.pallet_registry import PalletRegistry
from pallet_kernel.services.scan_log import ScanLog
from pallet_kernel.services.scan_service import ScanService
from pallet_kernel.services.stock_ledger import StockLedger

logger = get_logger("services.tracker")

PALLETS_COLLECTION = "pallets"
MOVEMENTS_COLLECTION = "stock_moves"
BALANCES_COLLECTION = "stock"
HISTORY_COLLECTION = "history"
LAST_SCAN_SLOT = "lastscan"


class PalletTracker:
    """Single-instance container for the tracker's services.

    Contract:
        Receives a KeyValueStore and TrackerSettings, and an optional Clock.
        Every repository, the ledger, the scan service and both selectors
        share that store and clock.

    Non-goals:
        - Does NOT own the store's lifecycle (no engine disposal).
    """

    def __init__(
        self,
        store: KeyValueStore,
        settings: TrackerSettings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.settings = settings or TrackerSettings()
        self._store = store
        self._clock = clock or SystemClock()
        ns = self.settings.namespace

        # Locations (one catalog per kind)
        catalogs = {
            kind: LocationCatalog(kind, JsonCollection(store, kind.collection_name, ns), self._clock)
            for kind in LocationKind
        }
        self.locations = LocationRegistry(
            catalogs,
            self._clock,
            limits=dict(self.settings.location_limits),
            default_depot_id=self.settings.default_depot.id,
            default_depot_name=self.settings.default_depot.name,
        )

        # Pallets and scan history
        self.pallets = PalletRegistry(JsonCollection(store, PALLETS_COLLECTION, ns), self._clock)
        self.scan_log = ScanLog(
            JsonCollection(store, HISTORY_COLLECTION, ns),
            self._clock,
            last_scan=JsonSlot(store, LAST_SCAN_SLOT, ns),
            limit=self.settings.history_limit,
        )

        # Stock ledger (movement log + incremental balance view)
        self.ledger = StockLedger(
            movements=JsonCollection(store, MOVEMENTS_COLLECTION, ns),
            balances=JsonCollection(store, BALANCES_COLLECTION, ns),
            clock=self._clock,
        )

        # Scan orchestration (depends on pallets, ledger, scan_log)
        self.scans = ScanService(
            self.pallets,
            self.ledger,
            self.scan_log,
            self._clock,
            default_depot_id=self.settings.default_depot.id,
        )

        # Read side
        self.stock_view = StockSelector(self.ledger, self.locations)
        self.pallet_view = PalletSelector(
            self.pallets,
            self.locations,
            self.scan_log,
            lost_after_days=self.settings.lost_after_days,
        )

    @property
    def store(self) -> KeyValueStore:
        """The store shared by all services."""
        return self._store

    @property
    def clock(self) -> Clock:
        """The clock shared by all services."""
        return self._clock

    @classmethod
    def in_memory(
        cls,
        settings: TrackerSettings | None = None,
        clock: Clock | None = None,
    ) -> PalletTracker:
        """A tracker over a fresh InMemoryKeyValueStore."""
        return cls(InMemoryKeyValueStore(), settings=settings, clock=clock)

    @classmethod
    def from_settings(
        cls,
        settings: TrackerSettings,
        clock: Clock | None = None,
    ) -> PalletTracker:
        """A tracker over the SQL store at ``settings.database_url``.

        Initializes the module-global engine and creates the ``kv_entries``
        table if it does not exist.
        """
        engine = init_engine_from_url(settings.database_url)
        create_tables(engine)
        store = SqlKeyValueStore(get_session_factory(), clock=clock)
        logger.info(
            "tracker_opened",
            extra={"database_url": settings.database_url, "namespace": settings.namespace},
        )
        return cls(store, settings=settings, clock=clock)


def build_tracker(config_path: Path | str | None = None, clock: Clock | None = None) -> PalletTracker:
    """Build a SQL-backed PalletTracker from the active settings.

    Args:
        config_path: Optional settings file; see ``get_active_settings``.
        clock: Optional clock; default SystemClock.
    """
    return PalletTracker.from_settings(get_active_settings(config_path), clock=clock)
