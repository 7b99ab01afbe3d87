"""
Balances -- Pure derivation of stock balances from movements.

Responsibility:
    Folds a movement log into per-(location, pallet type) quantities and
    applies single movements to an existing balance map. The fold is the
    reference semantics; StockLedger keeps an incremental view built with
    ``apply_movement`` and can check it against ``fold_movements``.

Architecture position:
    Kernel > Domain -- pure core, zero I/O.

Invariants enforced:
    - Each movement contributes -quantity to its origin key and +quantity to
      its destination key. Nothing else changes a balance.
    - Negative balances are kept as-is. There is no opening-inventory
      concept, so untracked pallets leaving the default depot drive it below
      zero.
    - A missing key reads as zero (``balance_of``).
    - Conservation: for every pallet type the signed deltas over all
      locations sum to zero.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal

from pallet_kernel.domain.records import BalanceKey, BalanceRow, StockMovement
from pallet_kernel.domain.values import LocationRef

ZERO = Decimal("0")

BalanceMap = dict[BalanceKey, Decimal]


def movement_deltas(movement: StockMovement) -> tuple[tuple[BalanceKey, Decimal], ...]:
    """The two signed deltas a movement applies."""
    return (
        ((movement.from_.kind, movement.from_.id, movement.pallet_type), -movement.quantity),
        ((movement.to.kind, movement.to.id, movement.pallet_type), movement.quantity),
    )


def apply_movement(balances: BalanceMap, movement: StockMovement) -> BalanceMap:
    """Apply one movement's deltas in place and return the map."""
    for key, delta in movement_deltas(movement):
        balances[key] = balances.get(key, ZERO) + delta
    return balances


def fold_movements(movements: Iterable[StockMovement]) -> BalanceMap:
    """
    Fold a movement log into a balance map.

    Order does not matter since addition is commutative; callers pass the
    log as stored (most recent first).
    """
    balances: BalanceMap = {}
    for movement in movements:
        apply_movement(balances, movement)
    return balances


def rows_to_map(rows: Iterable[BalanceRow]) -> BalanceMap:
    """Index balance rows by key, summing duplicates."""
    balances: BalanceMap = {}
    for row in rows:
        balances[row.key] = balances.get(row.key, ZERO) + row.quantity
    return balances


def map_to_rows(balances: Mapping[BalanceKey, Decimal], sort: bool = False) -> list[BalanceRow]:
    """Balance rows in map order, or in (kind, id, type) order if ``sort``."""
    items = list(balances.items())
    if sort:
        items.sort(key=lambda item: (item[0][0].value, item[0][1], item[0][2]))
    return [
        BalanceRow(location_kind=kind, location_id=loc_id, pallet_type=pallet_type, quantity=qty)
        for (kind, loc_id, pallet_type), qty in items
    ]


def nonzero(balances: Mapping[BalanceKey, Decimal]) -> BalanceMap:
    """Drop zero entries so retained and pruned zero rows compare equal."""
    return {key: qty for key, qty in balances.items() if qty != ZERO}


def balance_of(balances: Mapping[BalanceKey, Decimal], location: LocationRef, pallet_type: str) -> Decimal:
    """Quantity for one key; missing keys read as zero."""
    return balances.get((location.kind, location.id, pallet_type), ZERO)


def totals_by_type(balances: Mapping[BalanceKey, Decimal]) -> dict[str, Decimal]:
    """Sum of balances per pallet type across all locations."""
    totals: dict[str, Decimal] = {}
    for (_, _, pallet_type), qty in balances.items():
        totals[pallet_type] = totals.get(pallet_type, ZERO) + qty
    return totals

