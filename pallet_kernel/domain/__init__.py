"""
Pure domain layer.

Records, value objects, validation and balance derivation with NO
dependencies on:
- Storage
- SQLAlchemy
- Wall-clock time (a Clock is injected, or callers pass ``now``)

All domain records are immutable.
"""

from pallet_kernel.domain.balances import (
    BalanceMap,
    apply_movement,
    balance_of,
    fold_movements,
    map_to_rows,
    nonzero,
    rows_to_map,
    totals_by_type,
)
from pallet_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from pallet_kernel.domain.records import (
    BalanceRow,
    LocationEntity,
    LocationPatch,
    MovementFilter,
    Pallet,
    PalletPatch,
    ScanEvent,
    ScanEventDraft,
    ScanMove,
    StockMovement,
    normalize_code,
)
from pallet_kernel.domain.sightings import days_since_seen, is_lost
from pallet_kernel.domain.validation import ValidatedMovement, coerce_quantity, validate_movement
from pallet_kernel.domain.values import (
    UNSET,
    GeoFix,
    LocationKind,
    LocationRef,
    ScanSource,
)

__all__ = [
    # Values
    "UNSET",
    "GeoFix",
    "LocationKind",
    "LocationRef",
    "ScanSource",
    # Records
    "BalanceRow",
    "LocationEntity",
    "LocationPatch",
    "MovementFilter",
    "Pallet",
    "PalletPatch",
    "ScanEvent",
    "ScanEventDraft",
    "ScanMove",
    "StockMovement",
    "normalize_code",
    # Balances
    "BalanceMap",
    "apply_movement",
    "balance_of",
    "fold_movements",
    "map_to_rows",
    "nonzero",
    "rows_to_map",
    "totals_by_type",
    # Sightings
    "days_since_seen",
    "is_lost",
    # Validation
    "ValidatedMovement",
    "coerce_quantity",
    "validate_movement",
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
]
