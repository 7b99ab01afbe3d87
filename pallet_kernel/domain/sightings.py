"""
Sightings -- Pure "lost pallet" classification.

A pallet is lost if it was never seen, or was last seen more than the
configured number of days before now. The classification is a function of
the clock and ``Pallet.last_seen_at`` only; it is recomputed on every read
and never stored.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from pallet_kernel.domain.records import Pallet

DEFAULT_LOST_AFTER_DAYS = 30


def days_since_seen(pallet: Pallet, now: datetime) -> int | None:
    """Whole days since the pallet was last seen, or None if never seen."""
    if pallet.last_seen_at is None:
        return None
    return max((now - pallet.last_seen_at) // timedelta(days=1), 0)


def is_lost(pallet: Pallet, now: datetime, threshold_days: int = DEFAULT_LOST_AFTER_DAYS) -> bool:
    """True if never seen or last seen more than ``threshold_days`` ago."""
    if pallet.last_seen_at is None:
        return True
    return now - pallet.last_seen_at > timedelta(days=threshold_days)
