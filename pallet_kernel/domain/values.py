"""
Values -- Immutable domain value objects.

Responsibility:
    Provides the small value types shared by every record: LocationKind,
    LocationRef, GeoFix, ScanSource, and the UNSET sentinel used by patch
    structures. Also the timestamp and quantity wire helpers used when
    records are serialized to JSON.

Architecture position:
    Kernel > Domain -- pure core, zero I/O. Imported by records, validation
    and balances. No outward dependencies.

Invariants enforced:
    - LocationRef is a reference, never a copy of a location entity. Display
      names are resolved at read time.
    - Quantities travel as Decimal (never float) and serialize as strings.
    - Timestamps are timezone-aware UTC and serialize as ISO-8601.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Final


class LocationKind(str, Enum):
    """Kind of place a pallet can be: depot, shop or driver."""

    DEPOT = "DEPOT"
    SHOP = "SHOP"
    DRIVER = "DRIVER"

    @property
    def id_prefix(self) -> str:
        """Prefix for generated entity ids of this kind."""
        return _ID_PREFIXES[self]

    @property
    def collection_name(self) -> str:
        """Storage collection name for the catalog of this kind."""
        return _COLLECTION_NAMES[self]

    @classmethod
    def coerce(cls, value: Any) -> LocationKind | None:
        """Return the matching LocationKind, or None if value is not one."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                return None
        return None


_ID_PREFIXES = {
    LocationKind.DEPOT: "dep",
    LocationKind.SHOP: "shop",
    LocationKind.DRIVER: "drv",
}

_COLLECTION_NAMES = {
    LocationKind.DEPOT: "depots",
    LocationKind.SHOP: "shops",
    LocationKind.DRIVER: "drivers",
}


class ScanSource(str, Enum):
    """How a pallet code was read."""

    QR = "qr"
    MANUAL = "manual"


@dataclass(frozen=True, slots=True)
class LocationRef:
    """
    Tagged ``(kind, id)`` reference to a depot, shop or driver.

    Contract:
        A valid kind string is normalized to LocationKind on construction.
        An invalid or missing kind is kept as given so that movement
        validation can report it as a bad origin or destination rather than
        failing here.
    """

    kind: Any
    id: Any

    def __post_init__(self) -> None:
        coerced = LocationKind.coerce(self.kind)
        if coerced is not None:
            object.__setattr__(self, "kind", coerced)
        if isinstance(self.id, str):
            object.__setattr__(self, "id", self.id.strip())

    @property
    def is_complete(self) -> bool:
        """True if both kind and a non-empty id are present."""
        return isinstance(self.kind, LocationKind) and isinstance(self.id, str) and bool(self.id)

    def to_dict(self) -> dict[str, str]:
        kind = self.kind.value if isinstance(self.kind, LocationKind) else self.kind
        return {"kind": kind, "id": self.id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LocationRef:
        return cls(kind=data["kind"], id=data["id"])

    def __str__(self) -> str:
        kind = self.kind.value if isinstance(self.kind, LocationKind) else self.kind
        return f"{kind}:{self.id}"


@dataclass(frozen=True, slots=True)
class GeoFix:
    """A GPS fix supplied by the (external) geolocation prompt."""

    lat: float
    lng: float
    accuracy: float | None = None

    def to_dict(self) -> dict[str, float]:
        data = {"lat": self.lat, "lng": self.lng}
        if self.accuracy is not None:
            data["accuracy"] = self.accuracy
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GeoFix:
        return cls(
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            accuracy=float(data["accuracy"]) if data.get("accuracy") is not None else None,
        )


class _Unset:
    """Marker for a patch field that was not supplied."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


def is_set(value: Any) -> bool:
    """True if a patch field was supplied (explicit None counts as supplied)."""
    return value is not UNSET


# ---------------------------------------------------------------------------
# Wire helpers
# ---------------------------------------------------------------------------


def to_iso(value: datetime) -> str:
    """Serialize a timezone-aware datetime as ISO-8601 UTC."""
    return value.astimezone(timezone.utc).isoformat()


def from_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def quantity_to_str(value: Decimal) -> str:
    """Serialize a quantity without trailing exponent noise."""
    return format(value, "f")
