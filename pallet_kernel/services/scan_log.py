"""
Scan/History Log -- bounded, most-recent-first log of scan events.

Invariants enforced:
    - Events are prepended; ``list()`` is most recent first.
    - After every append the stored log holds at most ``limit`` events. The
      oldest are dropped silently, which bounds storage growth.
    - Events are never edited. ``clear()`` is the only deletion.

The last scanned code lives in its own slot next to the log so the scan
screen can prefill it.
"""

from __future__ import annotations

from typing import Any

from pallet_kernel.db.collections import JsonCollection, JsonSlot
from pallet_kernel.domain.clock import Clock
from pallet_kernel.domain.records import ScanEvent, ScanEventDraft
from pallet_kernel.logging_config import LogContext, get_logger
from pallet_kernel.services.base import BaseRepository
from pallet_kernel.utils.ids import SCAN_PREFIX, generate_id

logger = get_logger("services.scan_log")

DEFAULT_HISTORY_LIMIT = 2000


class ScanLog(BaseRepository[ScanEvent]):
    """Repository for scan events plus the last-scan slot."""

    def __init__(
        self,
        collection: JsonCollection,
        clock: Clock,
        last_scan: JsonSlot,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        super().__init__(collection, clock)
        if limit <= 0:
            raise ValueError(f"History limit must be positive, got {limit}")
        self.limit = limit
        self._last_scan = last_scan

    def _decode(self, data: dict[str, Any]) -> ScanEvent:
        return ScanEvent.from_dict(data)

    def _encode(self, record: ScanEvent) -> dict[str, Any]:
        return record.to_dict()

    def append(self, draft: ScanEventDraft) -> ScanEvent:
        """
        Record a scan.

        Assigns an id, and the clock's time if the draft has no ``ts``, then
        prepends the event and truncates the log to ``limit``.
        """
        event = ScanEvent(
            id=generate_id(SCAN_PREFIX),
            code=draft.code.strip(),
            ts=draft.ts or self.clock.now(),
            source=draft.source,
            geo=draft.geo,
            declared=draft.declared,
            pallet_type=draft.pallet_type,
            quantity=draft.quantity,
        )

        events = self._load()
        events.insert(0, event)
        dropped = max(len(events) - self.limit, 0)
        self._save(events[: self.limit])

        with LogContext.bind(scan_id=event.id, pallet_code=event.code):
            logger.info(
                "scan_recorded",
                extra={"source": event.source.value, "dropped": dropped},
            )
        return event

    def list(self) -> list[ScanEvent]:
        """All retained events, most recent first."""
        return self._load()

    def recent(self, n: int = 5) -> list[ScanEvent]:
        """The n most recent events, for the dashboard."""
        return self._load()[:n]

    def count(self) -> int:
        return len(self._load())

    def clear(self) -> None:
        """Replace the log with an empty one."""
        self.collection.clear()
        logger.info("scan_log_cleared")

    def set_last_scan(self, code: str) -> None:
        self._last_scan.write(code)

    def get_last_scan(self) -> str:
        """The last scanned code, or "" if none was recorded."""
        return self._last_scan.read("")
