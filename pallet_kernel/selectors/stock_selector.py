"""
Module: pallet_kernel.selectors.stock_selector
Responsibility: Read-only stock views for the stock screen and its exports:
    balances grouped per location with resolved display names, and
    movement lines with resolved origin and destination names.
Architecture position: Kernel > Selectors. Reads through StockLedger and
    LocationRegistry; never writes.

Invariants enforced:
    - Names are looked up at read time. A renamed location shows its new
      name on old movements; a deleted one shows "".
    - Groups are ordered by kind, then name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from pallet_kernel.domain.balances import ZERO
from pallet_kernel.domain.records import BalanceRow, MovementFilter, StockMovement
from pallet_kernel.domain.values import LocationKind, LocationRef
from pallet_kernel.services.location_registry import LocationRegistry
from pallet_kernel.services.stock_ledger import StockLedger


@dataclass
class LocationStock:
    """Balances of one location, with its display name."""

    kind: LocationKind
    id: str
    name: str
    rows: list[BalanceRow] = field(default_factory=list)

    @property
    def ref(self) -> LocationRef:
        return LocationRef(self.kind, self.id)

    @property
    def total(self) -> Decimal:
        return sum((r.quantity for r in self.rows), ZERO)


@dataclass(frozen=True)
class MovementLine:
    """A movement with its origin and destination names resolved."""

    movement: StockMovement
    from_name: str
    to_name: str


class StockSelector:
    """Read-only stock queries."""

    def __init__(self, ledger: StockLedger, locations: LocationRegistry):
        self.ledger = ledger
        self.locations = locations

    def grouped_stock(self, include_zero: bool = False) -> list[LocationStock]:
        """
        Balances grouped by location.

        Args:
            include_zero: Keep rows whose quantity nets to zero.

        Returns:
            One LocationStock per location that has rows, ordered by kind
            then name.
        """
        names = self.locations.name_index()
        groups: dict[LocationRef, LocationStock] = {}
        for row in self.ledger.get_balances():
            if not include_zero and row.quantity == ZERO:
                continue
            ref = row.location
            group = groups.get(ref)
            if group is None:
                group = LocationStock(
                    kind=row.location_kind,
                    id=row.location_id,
                    name=names.get(ref, ""),
                )
                groups[ref] = group
            group.rows.append(row)

        for group in groups.values():
            group.rows.sort(key=lambda r: r.pallet_type)
        return sorted(groups.values(), key=lambda g: (g.kind.value, g.name, g.id))

    def movement_lines(self, criteria: MovementFilter | None = None) -> list[MovementLine]:
        """Movements (most recent first) with resolved location names."""
        names = self.locations.name_index()
        return [
            MovementLine(
                movement=m,
                from_name=names.get(m.from_, ""),
                to_name=names.get(m.to, ""),
            )
            for m in self.ledger.get_movements(criteria)
        ]
