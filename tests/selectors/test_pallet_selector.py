"""Tests for the lost-pallet report and the dashboard summary."""

from datetime import timedelta

from pallet_kernel.domain.records import PalletPatch
from pallet_kernel.domain.values import LocationKind

EUR = "EUR/EPAL"


class TestLostPallets:
    def test_never_seen_and_stale_pallets(self, tracker, deterministic_clock, shop_a):
        tracker.pallets.upsert(PalletPatch(code="NEVER"))
        tracker.scans.record_scan("OLD")
        tracker.scans.move_via_scan("OLD", EUR, 1, shop_a.ref)
        deterministic_clock.advance_days(20)
        tracker.scans.record_scan("OLDER-NOT")
        deterministic_clock.advance_days(15)
        tracker.scans.record_scan("FRESH")

        lines = tracker.pallet_view.lost_pallets(deterministic_clock.now())

        assert [line.pallet.code for line in lines] == ["NEVER", "OLD"]
        assert lines[0].days_since_seen is None
        assert lines[0].last_location_name == ""
        assert lines[1].days_since_seen == 35
        assert lines[1].last_location_name == "Shop A"

    def test_min_days_override(self, tracker, deterministic_clock):
        tracker.scans.record_scan("A")
        deterministic_clock.advance_days(3)
        tracker.scans.record_scan("B")
        deterministic_clock.advance_days(3)
        tracker.scans.record_scan("C")

        lines = tracker.pallet_view.lost_pallets(deterministic_clock.now(), min_days=2)
        assert [(line.pallet.code, line.days_since_seen) for line in lines] == [("A", 6), ("B", 3)]

    def test_nothing_lost(self, tracker, deterministic_clock):
        tracker.scans.record_scan("A")
        assert tracker.pallet_view.lost_pallets(deterministic_clock.now()) == []


class TestSummary:
    def test_counts_and_distribution(self, tracker, deterministic_clock, shop_a, driver_1):
        tracker.locations.add(LocationKind.DEPOT, "North")
        tracker.scans.move_via_scan("P1", EUR, 1, shop_a.ref)
        tracker.scans.move_via_scan("P2", EUR, 1, driver_1.ref)
        tracker.scans.move_via_scan("P3", "CHEP", 1, shop_a.ref)
        tracker.pallets.upsert(PalletPatch(code="P4"))
        for code in ("P1", "P2", "P3", "P1", "P2", "P3"):
            tracker.scans.record_scan(code)
            deterministic_clock.tick()

        summary = tracker.pallet_view.summary(deterministic_clock.now())

        assert summary.drivers == 1
        assert summary.shops == 1
        assert summary.depots == 1
        assert summary.pallets == 4
        assert summary.scans == 6
        assert summary.lost_pallets == 1
        assert summary.type_distribution == {EUR: 2, "CHEP": 1, "Unspecified": 1}
        assert len(summary.recent_scans) == 5
        assert summary.recent_scans[0].code == "P3"

    def test_empty_tracker(self, tracker, deterministic_clock):
        summary = tracker.pallet_view.summary(deterministic_clock.now())
        assert summary.pallets == 0
        assert summary.type_distribution == {}
        assert summary.recent_scans == []
