"""
Movement validation -- pure checks run before any ledger write.

Responsibility:
    Decides whether a requested stock movement is admissible and returns
    its normalized inputs. Raises the typed ValidationError subclasses from
    ``pallet_kernel.exceptions``; never touches storage.

Architecture position:
    Kernel > Domain -- pure core, zero I/O. Called by StockLedger before it
    reads or writes any collection.

Invariants enforced:
    - pallet_type is non-empty after trimming.
    - quantity is a finite Decimal greater than zero, below MAX_QUANTITY
      and with at most MAX_QUANTITY_PLACES decimal places, so balance sums
      stay exact in the default Decimal context. Booleans, NaN, infinities
      and non-numeric strings are rejected.
    - origin and destination each carry a LocationKind and a non-empty id.
    - origin != destination. Same-location moves carry no information and
      the scan UI never issues them.

Check order is fixed (type, quantity, origin, destination, no-op) so that a
request with several problems always reports the same one.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from pallet_kernel.domain.values import LocationRef
from pallet_kernel.exceptions import (
    InvalidDestinationError,
    InvalidQuantityError,
    InvalidSourceError,
    NoOpMovementError,
    PalletTypeRequiredError,
)

MAX_QUANTITY = Decimal("1e12")
MAX_QUANTITY_PLACES = 6


@dataclass(frozen=True)
class ValidatedMovement:
    """Normalized movement inputs that passed every check."""

    pallet_type: str
    quantity: Decimal
    from_: LocationRef
    to: LocationRef
    note: str | None


def coerce_quantity(value: Any) -> Decimal:
    """
    Convert a requested quantity to a positive finite Decimal.

    Raises:
        InvalidQuantityError: for non-numeric, non-finite or <= 0 values,
            and for values too large or too finely divided to sum exactly.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidQuantityError(value)
    if isinstance(value, Decimal):
        qty = value
    elif isinstance(value, (int, float, str)):
        try:
            qty = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise InvalidQuantityError(value) from e
    else:
        raise InvalidQuantityError(value)

    if not qty.is_finite() or qty <= 0:
        raise InvalidQuantityError(value)
    if qty >= MAX_QUANTITY or qty.normalize().as_tuple().exponent < -MAX_QUANTITY_PLACES:
        raise InvalidQuantityError(value)
    return qty


def _as_ref(value: Any) -> LocationRef | None:
    if isinstance(value, LocationRef):
        return value
    if isinstance(value, dict):
        return LocationRef(value.get("kind"), value.get("id"))
    return None


def validate_movement(
    pallet_type: Any,
    quantity: Any,
    from_: Any,
    to: Any,
    note: str | None = None,
) -> ValidatedMovement:
    """
    Validate a movement request.

    Args:
        pallet_type: Pallet type tag, e.g. "EUR/EPAL".
        quantity: Requested quantity (Decimal, int, float or numeric string).
        from_: Origin LocationRef (or a ``{"kind", "id"}`` dict).
        to: Destination LocationRef (or a ``{"kind", "id"}`` dict).
        note: Optional free text; blank notes are dropped.

    Returns:
        ValidatedMovement with trimmed type and note and Decimal quantity.
    """
    if not isinstance(pallet_type, str) or not pallet_type.strip():
        raise PalletTypeRequiredError(pallet_type)

    qty = coerce_quantity(quantity)

    origin = _as_ref(from_)
    if origin is None or not origin.is_complete:
        raise InvalidSourceError(from_)

    destination = _as_ref(to)
    if destination is None or not destination.is_complete:
        raise InvalidDestinationError(to)

    if origin == destination:
        raise NoOpMovementError(origin.kind.value, origin.id)

    clean_note = note.strip() if isinstance(note, str) else None
    return ValidatedMovement(
        pallet_type=pallet_type.strip(),
        quantity=qty,
        from_=origin,
        to=destination,
        note=clean_note or None,
    )
