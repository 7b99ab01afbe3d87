"""
Pytest fixtures for the pallet tracker test suite.

Provides:
- Structured logging configured once per session, with a per-test capture
- A deterministic clock
- In-memory stores and a fully wired in-memory PalletTracker
- Location helpers for the common depot / shop / driver setup
"""

import json
import logging
from io import StringIO

import pytest

from pallet_config import TrackerSettings
from pallet_kernel.db.kv import InMemoryKeyValueStore
from pallet_kernel.domain.clock import DeterministicClock
from pallet_kernel.domain.values import LocationKind, LocationRef
from pallet_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from pallet_services import PalletTracker


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture pallet_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, tracker):
            tracker.ledger.record_movement(...)
            logs = captured_logs()
            assert any(r["message"] == "movement_recorded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("pallet_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock and storage fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def settings():
    return TrackerSettings()


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def tracker(store, settings, deterministic_clock) -> PalletTracker:
    """A fully wired tracker over the in-memory store."""
    return PalletTracker(store, settings=settings, clock=deterministic_clock)


@pytest.fixture
def depot_ref(settings) -> LocationRef:
    """The default depot every unseen pallet is assumed to start at."""
    return LocationRef(LocationKind.DEPOT, settings.default_depot.id)


@pytest.fixture
def shop_a(tracker):
    return tracker.locations.add(LocationKind.SHOP, "Shop A")


@pytest.fixture
def driver_1(tracker):
    return tracker.locations.add(LocationKind.DRIVER, "Driver 1")
