"""
Records -- Immutable domain records and their patch structures.

Responsibility:
    Defines the records stored in the tracker's collections (LocationEntity,
    Pallet, StockMovement, BalanceRow, ScanEvent), the drafts and patches
    used to create or update them, and their dict wire format.

Architecture position:
    Kernel > Domain -- pure core, zero I/O. Repositories in
    ``pallet_kernel.services`` convert between these records and the JSON
    lists kept in the key-value store.

Invariants enforced:
    - Records are frozen. Updates produce new records via ``apply_*_patch``.
    - Patch merge rule: an UNSET field never overwrites; an explicit None
      clears an optional field.
    - A pallet's primary ``code`` is never changed by a patch.
    - ``to_dict`` omits absent optional fields; ``from_dict`` accepts what
      ``to_dict`` produces.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from pallet_kernel.domain.values import (
    UNSET,
    GeoFix,
    LocationKind,
    LocationRef,
    ScanSource,
    from_iso,
    is_set,
    quantity_to_str,
    to_iso,
)


def _put(data: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        data[key] = value


def _opt_float(value: Any) -> float | None:
    return float(value) if value is not None else None


def _opt_time(value: Any) -> datetime | None:
    return from_iso(value) if value else None


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LocationEntity:
    """A depot, shop or driver in one of the three location catalogs."""

    id: str
    kind: LocationKind
    name: str
    created_at: datetime
    code: str | None = None
    phone: str | None = None
    address: str | None = None
    lat: float | None = None
    lng: float | None = None
    notes: str | None = None
    updated_at: datetime | None = None

    @property
    def ref(self) -> LocationRef:
        return LocationRef(self.kind, self.id)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "createdAt": to_iso(self.created_at),
        }
        _put(data, "code", self.code)
        _put(data, "phone", self.phone)
        _put(data, "address", self.address)
        _put(data, "lat", self.lat)
        _put(data, "lng", self.lng)
        _put(data, "notes", self.notes)
        if self.updated_at is not None:
            data["updatedAt"] = to_iso(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LocationEntity:
        kind = LocationKind.coerce(data["kind"])
        if kind is None:
            raise ValueError(f"Unknown location kind: {data['kind']!r}")
        return cls(
            id=data["id"],
            kind=kind,
            name=data["name"],
            created_at=from_iso(data["createdAt"]),
            code=data.get("code"),
            phone=data.get("phone"),
            address=data.get("address"),
            lat=_opt_float(data.get("lat")),
            lng=_opt_float(data.get("lng")),
            notes=data.get("notes"),
            updated_at=_opt_time(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class LocationPatch:
    """Partial update for a LocationEntity. Unsupplied fields stay UNSET."""

    name: Any = UNSET
    code: Any = UNSET
    phone: Any = UNSET
    address: Any = UNSET
    lat: Any = UNSET
    lng: Any = UNSET
    notes: Any = UNSET

    def supplied(self) -> dict[str, Any]:
        """Fields that were explicitly supplied, including explicit None."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if is_set(getattr(self, f.name))
        }


def apply_location_patch(
    entity: LocationEntity,
    patch: LocationPatch,
    updated_at: datetime,
) -> LocationEntity:
    """Merge a patch into a location. The caller validates ``name``."""
    return replace(entity, **patch.supplied(), updated_at=updated_at)


# ---------------------------------------------------------------------------
# Pallets
# ---------------------------------------------------------------------------


def normalize_code(code: str | None) -> str:
    """Canonical lookup form of a pallet code: trimmed and lower-cased."""
    return (code or "").strip().lower()


@dataclass(frozen=True)
class Pallet:
    """
    A physical pallet and its denormalized last known state.

    ``code`` is fixed at creation. ``alt_code`` is an optional second
    identifier that lookups also match.
    """

    id: str
    code: str
    alt_code: str | None = None
    type: str | None = None
    notes: str | None = None
    last_seen_at: datetime | None = None
    last_lat: float | None = None
    last_lng: float | None = None
    last_source: ScanSource | None = None
    last_loc_kind: LocationKind | None = None
    last_loc_id: str | None = None

    @property
    def last_location(self) -> LocationRef | None:
        if self.last_loc_kind is not None and self.last_loc_id:
            return LocationRef(self.last_loc_kind, self.last_loc_id)
        return None

    def matches(self, code: str) -> bool:
        """True if ``code`` equals the primary or alternate code, ignoring case."""
        norm = normalize_code(code)
        if not norm:
            return False
        return normalize_code(self.code) == norm or normalize_code(self.alt_code) == norm

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "code": self.code}
        _put(data, "altCode", self.alt_code)
        _put(data, "type", self.type)
        _put(data, "notes", self.notes)
        if self.last_seen_at is not None:
            data["lastSeenTs"] = to_iso(self.last_seen_at)
        _put(data, "lastLat", self.last_lat)
        _put(data, "lastLng", self.last_lng)
        if self.last_source is not None:
            data["lastSource"] = self.last_source.value
        if self.last_loc_kind is not None:
            data["lastLocKind"] = self.last_loc_kind.value
        _put(data, "lastLocId", self.last_loc_id)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Pallet:
        source = data.get("lastSource")
        return cls(
            id=data["id"],
            code=data["code"],
            alt_code=data.get("altCode"),
            type=data.get("type"),
            notes=data.get("notes"),
            last_seen_at=_opt_time(data.get("lastSeenTs")),
            last_lat=_opt_float(data.get("lastLat")),
            last_lng=_opt_float(data.get("lastLng")),
            last_source=ScanSource(source) if source else None,
            last_loc_kind=LocationKind.coerce(data.get("lastLocKind")),
            last_loc_id=data.get("lastLocId"),
        )


@dataclass(frozen=True)
class PalletPatch:
    """
    Partial pallet record keyed by ``code``.

    Used both to create a pallet (when no pallet matches ``code``) and to
    merge into an existing one.
    """

    code: str
    alt_code: Any = UNSET
    type: Any = UNSET
    notes: Any = UNSET
    last_seen_at: Any = UNSET
    last_lat: Any = UNSET
    last_lng: Any = UNSET
    last_source: Any = UNSET
    last_loc_kind: Any = UNSET
    last_loc_id: Any = UNSET

    def supplied(self) -> dict[str, Any]:
        """Supplied fields other than ``code``, including explicit None."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "code" and is_set(getattr(self, f.name))
        }


def apply_pallet_patch(pallet: Pallet, patch: PalletPatch) -> Pallet:
    """Merge a patch into a pallet, keeping the pallet's own code."""
    return replace(pallet, **patch.supplied())


def new_pallet(pallet_id: str, patch: PalletPatch) -> Pallet:
    """Build a new pallet from a patch; unsupplied fields are None."""
    return Pallet(id=pallet_id, code=patch.code.strip(), **patch.supplied())


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StockMovement:
    """An immutable ledger entry moving ``quantity`` of one pallet type."""

    id: str
    ts: datetime
    pallet_type: str
    quantity: Decimal
    from_: LocationRef
    to: LocationRef
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "ts": to_iso(self.ts),
            "palletType": self.pallet_type,
            "qty": quantity_to_str(self.quantity),
            "from": self.from_.to_dict(),
            "to": self.to.to_dict(),
        }
        _put(data, "note", self.note)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StockMovement:
        return cls(
            id=data["id"],
            ts=from_iso(data["ts"]),
            pallet_type=data["palletType"],
            quantity=Decimal(str(data["qty"])),
            from_=LocationRef.from_dict(data["from"]),
            to=LocationRef.from_dict(data["to"]),
            note=data.get("note"),
        )


BalanceKey = tuple[LocationKind, str, str]


@dataclass(frozen=True)
class BalanceRow:
    """Derived on-hand quantity for one (location, pallet type) pair."""

    location_kind: LocationKind
    location_id: str
    pallet_type: str
    quantity: Decimal

    @property
    def key(self) -> BalanceKey:
        return (self.location_kind, self.location_id, self.pallet_type)

    @property
    def location(self) -> LocationRef:
        return LocationRef(self.location_kind, self.location_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "locationKind": self.location_kind.value,
            "locationId": self.location_id,
            "palletType": self.pallet_type,
            "qty": quantity_to_str(self.quantity),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BalanceRow:
        kind = LocationKind.coerce(data["locationKind"])
        if kind is None:
            raise ValueError(f"Unknown location kind: {data['locationKind']!r}")
        return cls(
            location_kind=kind,
            location_id=data["locationId"],
            pallet_type=data["palletType"],
            quantity=Decimal(str(data["qty"])),
        )


# ---------------------------------------------------------------------------
# Scan events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanEventDraft:
    """A scan event before the log assigns its id (and, if absent, its ts)."""

    code: str
    source: ScanSource
    ts: datetime | None = None
    geo: GeoFix | None = None
    declared: LocationRef | None = None
    pallet_type: str | None = None
    quantity: Decimal | None = None


@dataclass(frozen=True)
class ScanEvent:
    """An immutable record that a pallet code was read."""

    id: str
    code: str
    ts: datetime
    source: ScanSource
    geo: GeoFix | None = None
    declared: LocationRef | None = None
    pallet_type: str | None = None
    quantity: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "code": self.code,
            "ts": to_iso(self.ts),
            "source": self.source.value,
        }
        if self.geo is not None:
            data.update(self.geo.to_dict())
        if self.declared is not None:
            declared = self.declared.to_dict()
            data["declaredKind"] = declared["kind"]
            data["declaredId"] = declared["id"]
        _put(data, "palletType", self.pallet_type)
        if self.quantity is not None:
            data["qty"] = quantity_to_str(self.quantity)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanEvent:
        geo = GeoFix.from_dict(data) if data.get("lat") is not None and data.get("lng") is not None else None
        declared = None
        if data.get("declaredKind") and data.get("declaredId"):
            declared = LocationRef(data["declaredKind"], data["declaredId"])
        qty = data.get("qty")
        return cls(
            id=data["id"],
            code=data["code"],
            ts=from_iso(data["ts"]),
            source=ScanSource(data["source"]),
            geo=geo,
            declared=declared,
            pallet_type=data.get("palletType"),
            quantity=Decimal(str(qty)) if qty is not None else None,
        )


@dataclass(frozen=True)
class MovementFilter:
    """Optional criteria for listing movements. Empty filter matches all."""

    pallet_type: str | None = None
    location: LocationRef | None = None
    since: datetime | None = None
    until: datetime | None = None
    limit: int | None = None

    def matches(self, movement: StockMovement) -> bool:
        if self.pallet_type is not None:
            if movement.pallet_type.strip().lower() != self.pallet_type.strip().lower():
                return False
        if self.location is not None:
            if self.location not in (movement.from_, movement.to):
                return False
        if self.since is not None and movement.ts < self.since:
            return False
        if self.until is not None and movement.ts > self.until:
            return False
        return True


@dataclass(frozen=True)
class ScanMove:
    """Result of moving a pallet via scan: the inferred route and the movement."""

    from_: LocationRef
    to: LocationRef
    movement: StockMovement = field(repr=False)
