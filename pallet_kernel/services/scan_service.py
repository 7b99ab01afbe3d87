"""
ScanService -- scan events turned into pallet state and stock movements.

Responsibility:
    The composed operations the scan screen calls:
    - ``record_scan``: log the read, refresh the pallet's last-seen state,
      remember the code as the last scan.
    - ``resolve_origin``: where a pallet is assumed to be right now.
    - ``move_via_scan``: record a movement from that origin to a declared
      destination, then move the pallet's last known location there.

Architecture position:
    Kernel > Services. Couples PalletRegistry, ScanLog and StockLedger;
    none of those know about each other.

Invariants enforced:
    - A pallet with no recorded location is assumed to be at the default
      depot. This is a documented assumption, not an inference.
    - move_via_scan writes the movement first and the pallet second. If
      the movement is rejected, the pallet is not touched.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pallet_kernel.domain.clock import Clock
from pallet_kernel.domain.records import (
    PalletPatch,
    ScanEvent,
    ScanEventDraft,
    ScanMove,
    normalize_code,
)
from pallet_kernel.domain.validation import coerce_quantity
from pallet_kernel.domain.values import UNSET, GeoFix, LocationKind, LocationRef, ScanSource
from pallet_kernel.exceptions import PalletCodeRequiredError
from pallet_kernel.logging_config import LogContext, get_logger
from pallet_kernel.services.pallet_registry import PalletRegistry
from pallet_kernel.services.scan_log import ScanLog
from pallet_kernel.services.stock_ledger import StockLedger

logger = get_logger("services.scan")


class ScanService:
    """Scan-to-stock orchestration."""

    def __init__(
        self,
        pallets: PalletRegistry,
        ledger: StockLedger,
        scan_log: ScanLog,
        clock: Clock,
        default_depot_id: str = "dep_default",
    ):
        self._pallets = pallets
        self._ledger = ledger
        self._scan_log = scan_log
        self._clock = clock
        self.default_depot_id = default_depot_id

    @property
    def default_origin(self) -> LocationRef:
        return LocationRef(LocationKind.DEPOT, self.default_depot_id)

    def resolve_origin(self, code: str) -> LocationRef:
        """
        The pallet's last known location, or the default depot.

        Args:
            code: Pallet code (case-insensitive).

        Returns:
            LocationRef of the pallet's last declared location if both its
            kind and id are recorded, else the default depot.
        """
        pallet = self._pallets.find_by_code(code)
        if pallet is not None and pallet.last_location is not None:
            return pallet.last_location
        return self.default_origin

    def move_via_scan(
        self,
        code: str,
        pallet_type: str,
        quantity: Any,
        destination: LocationRef,
        note: str | None = None,
    ) -> ScanMove:
        """
        Move a scanned pallet to a declared destination.

        Args:
            code: Scanned pallet code.
            pallet_type: Pallet type being moved.
            quantity: Quantity moved.
            destination: Where the pallet now is.
            note: Optional free text for the movement.

        Returns:
            ScanMove with the inferred origin, the destination and the
            recorded movement.

        Raises:
            PalletCodeRequiredError: If ``code`` is blank.
            ValidationError subclasses from StockLedger.record_movement.
        """
        if not normalize_code(code):
            raise PalletCodeRequiredError()

        with LogContext.bind(pallet_code=code.strip()):
            origin = self.resolve_origin(code)
            movement = self._ledger.record_movement(
                pallet_type,
                quantity,
                origin,
                destination,
                note=note,
            )
            self._pallets.upsert(
                PalletPatch(
                    code=code,
                    type=movement.pallet_type,
                    last_loc_kind=movement.to.kind,
                    last_loc_id=movement.to.id,
                )
            )
            logger.info(
                "pallet_moved_via_scan",
                extra={"movement_id": movement.id, "from_location": str(origin), "to_location": str(movement.to)},
            )

        return ScanMove(from_=movement.from_, to=movement.to, movement=movement)

    def record_scan(
        self,
        code: str,
        source: ScanSource = ScanSource.QR,
        geo: GeoFix | None = None,
        declared: LocationRef | None = None,
        pallet_type: str | None = None,
        quantity: Any = None,
    ) -> ScanEvent:
        """
        Log a scan and refresh the pallet's last-seen state.

        The scan does not change balances; the screen follows up with
        ``move_via_scan`` if the user declares a destination.

        Raises:
            PalletCodeRequiredError: If ``code`` is blank.
            InvalidQuantityError: If a quantity is given and is not positive.
        """
        if not normalize_code(code):
            raise PalletCodeRequiredError()

        qty: Decimal | None = coerce_quantity(quantity) if quantity is not None else None
        clean_type = pallet_type.strip() if isinstance(pallet_type, str) and pallet_type.strip() else None
        now = self._clock.now()

        event = self._scan_log.append(
            ScanEventDraft(
                code=code,
                source=source,
                ts=now,
                geo=geo,
                declared=declared,
                pallet_type=clean_type,
                quantity=qty,
            )
        )
        self._pallets.upsert(
            PalletPatch(
                code=code,
                last_seen_at=now,
                last_lat=geo.lat if geo is not None else UNSET,
                last_lng=geo.lng if geo is not None else UNSET,
                last_source=source,
            )
        )
        self._scan_log.set_last_scan(event.code)
        return event
