"""
Location Registry -- the depot, shop and driver catalogs.

Responsibility:
    Maintains three independent, name-addressable catalogs and resolves a
    LocationRef to a display name. The ledger stores references only, so
    renaming a location changes every historical movement's rendered name
    without rewriting history.

Architecture position:
    Kernel > Services. One LocationCatalog (a BaseRepository) per kind,
    composed by LocationRegistry.

Invariants enforced:
    - Names are stored trimmed and are never empty.
    - Each catalog is capped by its configured limit, if any.
    - New entities are prepended (newest first).
    - update/remove of an unknown id is a benign no-op (None / False).
    - The default depot is synthetic: it is never stored, always listed
      first by ``depot_options``, and always resolvable by name.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pallet_kernel.db.collections import JsonCollection
from pallet_kernel.domain.clock import Clock
from pallet_kernel.domain.records import LocationEntity, LocationPatch, apply_location_patch
from pallet_kernel.domain.values import LocationKind, LocationRef, is_set
from pallet_kernel.exceptions import LimitExceededError, LocationNameRequiredError
from pallet_kernel.logging_config import LogContext, get_logger
from pallet_kernel.services.base import BaseRepository
from pallet_kernel.utils.ids import generate_id

logger = get_logger("services.locations")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class LocationCatalog(BaseRepository[LocationEntity]):
    """The stored list of one location kind."""

    def __init__(self, kind: LocationKind, collection: JsonCollection, clock: Clock):
        super().__init__(collection, clock)
        self.kind = kind

    def _decode(self, data: dict[str, Any]) -> LocationEntity:
        return LocationEntity.from_dict({"kind": self.kind.value, **data})

    def _encode(self, record: LocationEntity) -> dict[str, Any]:
        return record.to_dict()

    def all(self) -> list[LocationEntity]:
        return self._load()

    def save(self, entities: list[LocationEntity]) -> bool:
        return self._save(entities)


class LocationRegistry:
    """
    The three location catalogs behind one kind-addressed API.

    Contract:
        Every mutation persists the whole catalog of the affected kind.
        Reads never fail; an unavailable store reads as empty catalogs.
    """

    def __init__(
        self,
        catalogs: dict[LocationKind, LocationCatalog],
        clock: Clock,
        limits: dict[LocationKind, int | None] | None = None,
        default_depot_id: str = "dep_default",
        default_depot_name: str = "Main Depot",
    ):
        missing = set(LocationKind) - set(catalogs)
        if missing:
            raise ValueError(f"Missing catalogs for: {sorted(k.value for k in missing)}")
        self._catalogs = catalogs
        self._clock = clock
        self._limits = limits or {}
        self.default_depot_id = default_depot_id
        self.default_depot_name = default_depot_name

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self, kind: LocationKind) -> list[LocationEntity]:
        """All entities of a kind, newest first."""
        return self._catalogs[kind].all()

    def get(self, kind: LocationKind, location_id: str) -> LocationEntity | None:
        for entity in self.list(kind):
            if entity.id == location_id:
                return entity
        return None

    def count(self, kind: LocationKind) -> int:
        return len(self.list(kind))

    def default_depot_entity(self) -> LocationEntity:
        """The synthetic main depot, never stored."""
        return LocationEntity(
            id=self.default_depot_id,
            kind=LocationKind.DEPOT,
            name=self.default_depot_name,
            created_at=_EPOCH,
        )

    def default_depot_ref(self) -> LocationRef:
        return LocationRef(LocationKind.DEPOT, self.default_depot_id)

    def depot_options(self) -> list[LocationEntity]:
        """The default depot followed by the stored depots."""
        return [self.default_depot_entity(), *self.list(LocationKind.DEPOT)]

    def resolve_name(self, ref: LocationRef) -> str:
        """Display name for a reference; "" if the entity no longer exists."""
        if ref == self.default_depot_ref():
            stored = self.get(LocationKind.DEPOT, ref.id)
            return stored.name if stored else self.default_depot_name
        if not ref.is_complete:
            return ""
        entity = self.get(ref.kind, ref.id)
        return entity.name if entity else ""

    def name_index(self) -> dict[LocationRef, str]:
        """Every resolvable reference mapped to its display name."""
        index = {self.default_depot_ref(): self.default_depot_name}
        for kind in LocationKind:
            for entity in self.list(kind):
                index[entity.ref] = entity.name
        return index

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, kind: LocationKind, name: str, **metadata: Any) -> LocationEntity:
        """
        Create a location.

        Args:
            kind: Catalog to add to.
            name: Display name; trimmed, must not be empty.
            **metadata: Optional code, phone, address, lat, lng, notes.

        Returns:
            The created LocationEntity.

        Raises:
            LocationNameRequiredError: If name is blank.
            LimitExceededError: If the catalog is at its cap.
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise LocationNameRequiredError(kind.value)

        catalog = self._catalogs[kind]
        entities = catalog.all()
        limit = self._limits.get(kind)
        if limit is not None and len(entities) >= limit:
            logger.warning(
                "location_limit_reached",
                extra={"kind": kind.value, "limit": limit},
            )
            raise LimitExceededError(kind.value, limit)

        patch = LocationPatch(**metadata)
        entity = LocationEntity(
            id=generate_id(kind.id_prefix),
            kind=kind,
            name=clean_name,
            created_at=self._clock.now(),
        )
        entity = apply_location_patch(entity, patch, updated_at=None)

        entities.insert(0, entity)
        catalog.save(entities)

        with LogContext.bind(location_id=entity.id):
            logger.info("location_added", extra={"kind": kind.value, "location_name": entity.name})
        return entity

    def update(self, kind: LocationKind, location_id: str, patch: LocationPatch) -> LocationEntity | None:
        """
        Merge a patch into a location.

        Returns:
            The updated entity, or None if no entity has that id.

        Raises:
            LocationNameRequiredError: If the patch sets a blank name.
        """
        if is_set(patch.name):
            clean_name = (patch.name or "").strip()
            if not clean_name:
                raise LocationNameRequiredError(kind.value)
            patch = LocationPatch(**{**patch.supplied(), "name": clean_name})

        catalog = self._catalogs[kind]
        entities = catalog.all()
        for idx, entity in enumerate(entities):
            if entity.id == location_id:
                updated = apply_location_patch(entity, patch, updated_at=self._clock.now())
                entities[idx] = updated
                catalog.save(entities)
                with LogContext.bind(location_id=location_id):
                    logger.info(
                        "location_updated",
                        extra={"kind": kind.value, "fields": sorted(patch.supplied())},
                    )
                return updated

        logger.info("location_update_not_found", extra={"kind": kind.value, "id": location_id})
        return None

    def remove(self, kind: LocationKind, location_id: str) -> bool:
        """Delete a location. Returns False (not an error) if it was absent."""
        catalog = self._catalogs[kind]
        entities = catalog.all()
        kept = [e for e in entities if e.id != location_id]
        if len(kept) == len(entities):
            return False
        catalog.save(kept)
        with LogContext.bind(location_id=location_id):
            logger.info("location_removed", extra={"kind": kind.value})
        return True
