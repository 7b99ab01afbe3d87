"""Tests for scan handling and last-known-location inference."""

from decimal import Decimal

import pytest

from pallet_kernel.domain.records import PalletPatch
from pallet_kernel.domain.values import GeoFix, LocationKind, LocationRef, ScanSource
from pallet_kernel.exceptions import (
    InvalidQuantityError,
    NoOpMovementError,
    PalletCodeRequiredError,
)

EUR = "EUR/EPAL"


class TestResolveOrigin:
    def test_unseen_pallet_starts_at_default_depot(self, tracker, depot_ref):
        assert tracker.scans.resolve_origin("PAL-1") == depot_ref

    def test_pallet_without_location_starts_at_default_depot(self, tracker, depot_ref):
        tracker.pallets.upsert(PalletPatch(code="PAL-1", type=EUR))
        assert tracker.scans.resolve_origin("pal-1") == depot_ref

    def test_half_recorded_location_is_ignored(self, tracker, depot_ref):
        tracker.pallets.upsert(PalletPatch(code="PAL-1", last_loc_kind=LocationKind.SHOP))
        assert tracker.scans.resolve_origin("PAL-1") == depot_ref

    def test_known_location(self, tracker, shop_a):
        tracker.pallets.upsert(PalletPatch(code="PAL-1", last_loc_kind=LocationKind.SHOP, last_loc_id=shop_a.id))
        assert tracker.scans.resolve_origin("PAL-1") == shop_a.ref


class TestMoveViaScan:
    def test_first_move_originates_at_default_depot(self, tracker, depot_ref, shop_a):
        result = tracker.scans.move_via_scan("PAL-1", EUR, 5, shop_a.ref)

        assert result.from_ == depot_ref
        assert result.to == shop_a.ref
        assert tracker.ledger.get_balance(depot_ref, EUR) == Decimal("-5")
        assert tracker.ledger.get_balance(shop_a.ref, EUR) == Decimal("5")

        pallet = tracker.pallets.find_by_code("PAL-1")
        assert pallet.type == EUR
        assert pallet.last_location == shop_a.ref

    def test_next_move_originates_at_last_destination(self, tracker, depot_ref, shop_a, driver_1):
        tracker.scans.move_via_scan("PAL-1", EUR, 5, shop_a.ref)
        result = tracker.scans.move_via_scan("pal-1", EUR, 2, driver_1.ref)

        assert result.from_ == shop_a.ref
        assert tracker.ledger.get_balance(shop_a.ref, EUR) == Decimal("3")
        assert tracker.ledger.get_balance(driver_1.ref, EUR) == Decimal("2")
        assert tracker.pallets.count() == 1
        assert tracker.pallets.find_by_code("PAL-1").last_location == driver_1.ref
        assert tracker.ledger.verify_balances()

    def test_pallet_type_follows_latest_move(self, tracker, shop_a, driver_1):
        tracker.scans.move_via_scan("PAL-1", EUR, 1, shop_a.ref)
        tracker.scans.move_via_scan("PAL-1", "CHEP", 1, driver_1.ref)
        assert tracker.pallets.find_by_code("PAL-1").type == "CHEP"

    def test_keeps_other_pallet_fields(self, tracker, shop_a):
        tracker.pallets.upsert(PalletPatch(code="PAL-1", notes="blue", alt_code="ALT"))
        tracker.scans.move_via_scan("alt", EUR, 1, shop_a.ref)
        pallet = tracker.pallets.find_by_code("PAL-1")
        assert pallet.notes == "blue"
        assert pallet.last_location == shop_a.ref

    def test_rejected_move_touches_nothing(self, tracker, shop_a, store):
        tracker.pallets.upsert(PalletPatch(code="PAL-1", notes="n"))
        snapshot = {k: store.get(k) for k in store.keys()}

        with pytest.raises(InvalidQuantityError):
            tracker.scans.move_via_scan("PAL-1", EUR, 0, shop_a.ref)

        assert {k: store.get(k) for k in store.keys()} == snapshot

    def test_move_to_current_location_rejected(self, tracker, shop_a):
        tracker.scans.move_via_scan("PAL-1", EUR, 1, shop_a.ref)
        with pytest.raises(NoOpMovementError):
            tracker.scans.move_via_scan("PAL-1", EUR, 1, shop_a.ref)
        assert tracker.ledger.count() == 1

    def test_blank_code_rejected_before_writing(self, tracker, shop_a):
        with pytest.raises(PalletCodeRequiredError):
            tracker.scans.move_via_scan("  ", EUR, 1, shop_a.ref)
        assert tracker.ledger.count() == 0
        assert tracker.pallets.count() == 0

    def test_logged_with_pallet_code(self, tracker, shop_a, captured_logs):
        result = tracker.scans.move_via_scan(" PAL-1 ", EUR, 1, shop_a.ref)
        moved = [r for r in captured_logs() if r["message"] == "pallet_moved_via_scan"]
        assert moved[0]["pallet_code"] == "PAL-1"
        assert moved[0]["movement_id"] == result.movement.id
        assert moved[0]["to_location"] == str(shop_a.ref)


class TestRecordScan:
    def test_creates_pallet_and_sets_last_seen(self, tracker, deterministic_clock):
        event = tracker.scans.record_scan("PAL-1", geo=GeoFix(48.1, 11.5, 10.0))

        assert event.source is ScanSource.QR
        pallet = tracker.pallets.find_by_code("PAL-1")
        assert pallet.last_seen_at == deterministic_clock.now()
        assert pallet.last_lat == 48.1
        assert pallet.last_lng == 11.5
        assert pallet.last_source is ScanSource.QR
        assert tracker.scan_log.get_last_scan() == "PAL-1"
        assert tracker.scan_log.list()[0].id == event.id

    def test_no_fix_keeps_previous_coordinates(self, tracker, deterministic_clock):
        tracker.scans.record_scan("PAL-1", geo=GeoFix(48.1, 11.5))
        deterministic_clock.advance_days(1)
        tracker.scans.record_scan("pal-1", source=ScanSource.MANUAL)

        pallet = tracker.pallets.find_by_code("PAL-1")
        assert pallet.last_lat == 48.1
        assert pallet.last_source is ScanSource.MANUAL
        assert pallet.last_seen_at == deterministic_clock.now()

    def test_scan_does_not_change_balances_or_location(self, tracker, shop_a):
        event = tracker.scans.record_scan("PAL-1", declared=shop_a.ref, pallet_type=" CHEP ", quantity="3")
        assert event.declared == shop_a.ref
        assert event.pallet_type == "CHEP"
        assert event.quantity == Decimal("3")
        assert tracker.ledger.count() == 0
        assert tracker.pallets.find_by_code("PAL-1").last_location is None

    def test_invalid_quantity(self, tracker):
        with pytest.raises(InvalidQuantityError):
            tracker.scans.record_scan("PAL-1", quantity=-1)
        assert tracker.scan_log.count() == 0

    def test_blank_code(self, tracker):
        with pytest.raises(PalletCodeRequiredError):
            tracker.scans.record_scan("")

    def test_scan_then_move(self, tracker, depot_ref, driver_1):
        tracker.scans.record_scan("PAL-1")
        result = tracker.scans.move_via_scan(tracker.scan_log.get_last_scan(), EUR, 4, driver_1.ref)
        assert result.from_ == depot_ref
        assert tracker.pallets.count() == 1


class TestCustomDefaultDepot:
    def test_origin_uses_configured_depot(self, store, deterministic_clock, shop_a):
        from pallet_config import DefaultDepot, TrackerSettings
        from pallet_services import PalletTracker

        settings = TrackerSettings(default_depot=DefaultDepot(id="dep_hq", name="HQ"))
        other = PalletTracker(store, settings=settings, clock=deterministic_clock)

        result = other.scans.move_via_scan("PAL-9", EUR, 1, shop_a.ref)
        assert result.from_ == LocationRef(LocationKind.DEPOT, "dep_hq")
        assert other.locations.resolve_name(result.from_) == "HQ"
