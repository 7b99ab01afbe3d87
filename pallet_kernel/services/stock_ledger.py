"""
StockLedger -- append-only movement log and the balance view derived from it.

Responsibility:
    Records stock movements of one pallet type between two locations and
    keeps an incrementally maintained balance view next to the log.
    Movements are the sole source of truth: the balance view can always be
    recomputed by folding the log (``fold_balances``), checked against it
    (``verify_balances``) and repaired from it (``rebuild_balances``).

Architecture position:
    Kernel > Services -- imperative shell around domain/validation.py and
    domain/balances.py. Owns two collections: movements and balances.

Invariants enforced:
    - Validation runs before any read or write; a rejected movement changes
      nothing (see domain/validation.py for the rules and their order).
    - Append-only: movements are never edited or deleted, except by the
      administrative ``clear``.
    - Every recorded movement applies exactly -quantity to its origin row
      and +quantity to its destination row. Rows are created on first use
      and may go negative.
    - The movement log is never truncated. Dropping old movements would make
      the fold disagree with the incremental view.

Failure modes:
    - ValidationError subclasses from validate_movement().
    - Storage failures are absorbed by the collections (logged, in-memory
      result returned).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pallet_kernel.db.collections import JsonCollection
from pallet_kernel.domain.balances import (
    apply_movement,
    balance_of,
    fold_movements,
    map_to_rows,
    nonzero,
    rows_to_map,
)
from pallet_kernel.domain.clock import Clock
from pallet_kernel.domain.records import BalanceRow, MovementFilter, StockMovement
from pallet_kernel.domain.validation import validate_movement
from pallet_kernel.domain.values import LocationRef
from pallet_kernel.exceptions import ValidationError
from pallet_kernel.logging_config import LogContext, get_logger
from pallet_kernel.services.base import decode_all
from pallet_kernel.utils.ids import MOVEMENT_PREFIX, generate_id

logger = get_logger("services.stock_ledger")


class StockLedger:
    """
    The stock accounting core.

    Contract:
        ``record_movement`` is the only way balances change. Both the
        incremental view (``get_balances``) and the fold (``fold_balances``)
        agree on every non-zero (location, pallet type) key for any log
        written through this class.
    """

    def __init__(
        self,
        movements: JsonCollection,
        balances: JsonCollection,
        clock: Clock,
    ):
        self._movements = movements
        self._balances = balances
        self._clock = clock

    # ------------------------------------------------------------------
    # Storage helpers
    # ------------------------------------------------------------------

    def _load_movements(self) -> list[StockMovement]:
        return decode_all(self._movements, StockMovement.from_dict)

    def _load_balance_rows(self) -> list[BalanceRow]:
        return decode_all(self._balances, BalanceRow.from_dict)

    def _save_balance_rows(self, rows: list[BalanceRow]) -> None:
        self._balances.write([r.to_dict() for r in rows])

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def record_movement(
        self,
        pallet_type: Any,
        quantity: Any,
        from_: Any,
        to: Any,
        note: str | None = None,
        ts: datetime | None = None,
    ) -> StockMovement:
        """
        Append a movement and apply its two balance deltas.

        Args:
            pallet_type: Pallet type tag, e.g. "EUR/EPAL".
            quantity: Positive finite quantity.
            from_: Origin LocationRef.
            to: Destination LocationRef.
            note: Optional free text.
            ts: Movement time; defaults to the clock.

        Returns:
            The recorded StockMovement with its id and timestamp.

        Raises:
            PalletTypeRequiredError, InvalidQuantityError, InvalidSourceError,
            InvalidDestinationError, NoOpMovementError.
        """
        try:
            valid = validate_movement(pallet_type, quantity, from_, to, note)
        except ValidationError as e:
            logger.warning(
                "movement_rejected",
                extra={"reason_code": e.code, "pallet_type": str(pallet_type)},
            )
            raise

        movement = StockMovement(
            id=generate_id(MOVEMENT_PREFIX),
            ts=ts or self._clock.now(),
            pallet_type=valid.pallet_type,
            quantity=valid.quantity,
            from_=valid.from_,
            to=valid.to,
            note=valid.note,
        )

        movements = self._movements.read()
        movements.insert(0, movement.to_dict())
        self._movements.write(movements)

        balances = rows_to_map(self._load_balance_rows())
        apply_movement(balances, movement)
        self._save_balance_rows(map_to_rows(balances))

        with LogContext.bind(movement_id=movement.id):
            logger.info(
                "movement_recorded",
                extra={
                    "pallet_type": movement.pallet_type,
                    "quantity": movement.quantity,
                    "from_location": str(movement.from_),
                    "to_location": str(movement.to),
                },
            )
        return movement

    def rebuild_balances(self) -> list[BalanceRow]:
        """Replace the incremental view with the fold of the full log."""
        rows = self.fold_balances()
        self._save_balance_rows(rows)
        logger.info("balances_rebuilt", extra={"rows": len(rows)})
        return rows

    def clear(self) -> None:
        """Administrative bulk-clear of the movement log and balance view."""
        self._movements.clear()
        self._balances.clear()
        logger.warning("stock_ledger_cleared")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_movements(self, criteria: MovementFilter | None = None) -> list[StockMovement]:
        """Movements, most recent first, optionally filtered."""
        movements = self._load_movements()
        if criteria is None:
            return movements
        matched = [m for m in movements if criteria.matches(m)]
        if criteria.limit is not None:
            matched = matched[: criteria.limit]
        return matched

    def get_balances(self) -> list[BalanceRow]:
        """The incrementally maintained balance view (zero rows retained)."""
        return self._load_balance_rows()

    def fold_balances(self) -> list[BalanceRow]:
        """Reference balances: fold of the full log, zero rows omitted."""
        return map_to_rows(nonzero(fold_movements(self._load_movements())), sort=True)

    def get_balance(self, location: LocationRef, pallet_type: str) -> Decimal:
        """On-hand quantity for one location and type; missing rows read as 0."""
        return balance_of(rows_to_map(self._load_balance_rows()), location, pallet_type)

    def verify_balances(self) -> bool:
        """True if the incremental view agrees with the fold on every key."""
        incremental = nonzero(rows_to_map(self._load_balance_rows()))
        folded = nonzero(fold_movements(self._load_movements()))
        consistent = incremental == folded
        if not consistent:
            diff = sorted(
                f"{k[0].value}:{k[1]}:{k[2]}"
                for k in set(incremental) | set(folded)
                if incremental.get(k) != folded.get(k)
            )
            logger.warning("balance_view_drift", extra={"keys": diff})
        return consistent

    def count(self) -> int:
        return len(self._movements.read())
