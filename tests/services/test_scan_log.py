"""Tests for the bounded scan history log."""

from decimal import Decimal

import pytest

from pallet_kernel.db.collections import JsonCollection, JsonSlot
from pallet_kernel.domain.records import ScanEventDraft
from pallet_kernel.domain.values import GeoFix, ScanSource
from pallet_kernel.services.scan_log import ScanLog


def _draft(code: str, **kwargs) -> ScanEventDraft:
    return ScanEventDraft(code=code, source=kwargs.pop("source", ScanSource.QR), **kwargs)


class TestAppend:
    def test_assigns_id_and_clock_time(self, tracker, deterministic_clock):
        event = tracker.scan_log.append(_draft(" PAL-1 "))
        assert event.id.startswith("scan_")
        assert event.code == "PAL-1"
        assert event.ts == deterministic_clock.now()

    def test_most_recent_first(self, tracker, deterministic_clock):
        for code in ("A", "B", "C"):
            tracker.scan_log.append(_draft(code))
            deterministic_clock.tick()
        assert [e.code for e in tracker.scan_log.list()] == ["C", "B", "A"]
        assert [e.code for e in tracker.scan_log.recent(2)] == ["C", "B"]

    def test_optional_fields_are_stored(self, tracker):
        tracker.scan_log.append(
            _draft("A", source=ScanSource.MANUAL, geo=GeoFix(1.0, 2.0), pallet_type="CHEP", quantity=Decimal("2"))
        )
        event = tracker.scan_log.list()[0]
        assert event.source is ScanSource.MANUAL
        assert event.geo == GeoFix(1.0, 2.0)
        assert event.pallet_type == "CHEP"
        assert event.quantity == Decimal("2")


class TestBound:
    def test_history_keeps_2000_most_recent(self, tracker):
        for i in range(2050):
            tracker.scan_log.append(_draft(f"P{i}"))

        events = tracker.scan_log.list()
        assert len(events) == 2000
        assert events[0].code == "P2049"
        assert events[-1].code == "P50"

    def test_custom_limit(self, store, deterministic_clock, captured_logs):
        log = ScanLog(
            JsonCollection(store, "history"),
            deterministic_clock,
            last_scan=JsonSlot(store, "lastscan"),
            limit=3,
        )
        for code in "ABCDE":
            log.append(_draft(code))
        assert [e.code for e in log.list()] == ["E", "D", "C"]
        recorded = [r for r in captured_logs() if r["message"] == "scan_recorded"]
        assert recorded[-1]["dropped"] == 1

    def test_limit_must_be_positive(self, store, deterministic_clock):
        with pytest.raises(ValueError):
            ScanLog(JsonCollection(store, "history"), deterministic_clock, last_scan=JsonSlot(store, "lastscan"), limit=0)


class TestLastScanAndClear:
    def test_last_scan_slot(self, tracker):
        assert tracker.scan_log.get_last_scan() == ""
        tracker.scan_log.set_last_scan("PAL-1")
        assert tracker.scan_log.get_last_scan() == "PAL-1"

    def test_clear(self, tracker):
        tracker.scan_log.append(_draft("A"))
        tracker.scan_log.clear()
        assert tracker.scan_log.count() == 0
