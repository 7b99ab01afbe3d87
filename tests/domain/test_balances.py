"""Tests for the pure balance derivation and the lost-pallet classification."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from pallet_kernel.domain.balances import (
    ZERO,
    apply_movement,
    balance_of,
    fold_movements,
    map_to_rows,
    movement_deltas,
    nonzero,
    rows_to_map,
    totals_by_type,
)
from pallet_kernel.domain.records import BalanceRow, Pallet, StockMovement
from pallet_kernel.domain.sightings import days_since_seen, is_lost
from pallet_kernel.domain.values import LocationKind, LocationRef

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

DEPOT = LocationRef(LocationKind.DEPOT, "dep_default")
SHOP = LocationRef(LocationKind.SHOP, "shop_a")
DRIVER = LocationRef(LocationKind.DRIVER, "drv_1")


def _move(from_, to, qty, pallet_type="EUR/EPAL", n=1) -> StockMovement:
    return StockMovement(
        id=f"stk_{n}",
        ts=T0,
        pallet_type=pallet_type,
        quantity=Decimal(qty),
        from_=from_,
        to=to,
    )


class TestMovementDeltas:
    def test_two_signed_deltas(self):
        deltas = dict(movement_deltas(_move(DEPOT, SHOP, "3")))
        assert deltas == {
            (LocationKind.DEPOT, "dep_default", "EUR/EPAL"): Decimal("-3"),
            (LocationKind.SHOP, "shop_a", "EUR/EPAL"): Decimal("3"),
        }


class TestFold:
    def test_two_movement_scenario(self):
        log = [_move(DEPOT, SHOP, "3", n=1), _move(DEPOT, DRIVER, "2", n=2)]
        balances = fold_movements(log)
        assert balance_of(balances, DEPOT, "EUR/EPAL") == Decimal("-5")
        assert balance_of(balances, SHOP, "EUR/EPAL") == Decimal("3")
        assert balance_of(balances, DRIVER, "EUR/EPAL") == Decimal("2")

    def test_missing_key_reads_zero(self):
        assert balance_of({}, SHOP, "CHEP") == ZERO

    def test_order_does_not_matter(self):
        log = [_move(DEPOT, SHOP, "3", n=1), _move(SHOP, DRIVER, "1", n=2), _move(DRIVER, DEPOT, "4", n=3)]
        assert fold_movements(log) == fold_movements(reversed(log))

    def test_types_are_independent(self):
        balances = fold_movements([_move(DEPOT, SHOP, "3"), _move(SHOP, DEPOT, "3", pallet_type="CHEP")])
        assert balance_of(balances, SHOP, "EUR/EPAL") == Decimal("3")
        assert balance_of(balances, SHOP, "CHEP") == Decimal("-3")

    def test_conservation_per_type(self):
        log = [_move(DEPOT, SHOP, "3"), _move(SHOP, DRIVER, "1.5"), _move(DEPOT, DRIVER, "2", pallet_type="CHEP")]
        assert totals_by_type(fold_movements(log)) == {"EUR/EPAL": ZERO, "CHEP": ZERO}

    def test_round_trip_leaves_zero_entries(self):
        balances = fold_movements([_move(DEPOT, SHOP, "3"), _move(SHOP, DEPOT, "3")])
        assert balance_of(balances, SHOP, "EUR/EPAL") == ZERO
        assert nonzero(balances) == {}


class TestRows:
    def test_rows_to_map_sums_duplicates(self):
        rows = [
            BalanceRow(LocationKind.SHOP, "shop_a", "EUR/EPAL", Decimal("2")),
            BalanceRow(LocationKind.SHOP, "shop_a", "EUR/EPAL", Decimal("1")),
        ]
        assert rows_to_map(rows) == {(LocationKind.SHOP, "shop_a", "EUR/EPAL"): Decimal("3")}

    def test_map_to_rows_keeps_order_unless_sorted(self):
        balances = {
            (LocationKind.SHOP, "shop_a", "EUR/EPAL"): Decimal("1"),
            (LocationKind.DEPOT, "dep_default", "EUR/EPAL"): Decimal("-1"),
        }
        assert [r.location_kind for r in map_to_rows(balances)] == [LocationKind.SHOP, LocationKind.DEPOT]
        assert [r.location_kind for r in map_to_rows(balances, sort=True)] == [LocationKind.DEPOT, LocationKind.SHOP]

    def test_apply_movement_matches_fold(self):
        log = [_move(DEPOT, SHOP, "3", n=1), _move(SHOP, DRIVER, "1", n=2)]
        incremental: dict = {}
        for movement in log:
            apply_movement(incremental, movement)
        assert incremental == fold_movements(log)


class TestSightings:
    def test_never_seen_is_lost(self):
        pallet = Pallet(id="p", code="c")
        assert is_lost(pallet, T0)
        assert days_since_seen(pallet, T0) is None

    def test_threshold_is_strict(self):
        pallet = Pallet(id="p", code="c", last_seen_at=T0)
        assert not is_lost(pallet, T0 + timedelta(days=30))
        assert is_lost(pallet, T0 + timedelta(days=30, seconds=1))
        assert is_lost(pallet, T0 + timedelta(days=8), threshold_days=7)

    def test_days_since_seen_floors_and_clamps(self):
        pallet = Pallet(id="p", code="c", last_seen_at=T0)
        assert days_since_seen(pallet, T0 + timedelta(days=2, hours=23)) == 2
        assert days_since_seen(pallet, T0 - timedelta(hours=1)) == 0
