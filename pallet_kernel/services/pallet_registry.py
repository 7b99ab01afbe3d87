"""
Service layer for the Pallet Registry.

Catalog of physical pallets keyed by a case-insensitive code, each carrying
its last known state (last seen time, GPS fix, declared location).

Invariants enforced:
    - Lookups trim and ignore case, and try the primary code before the
      alternate code.
    - A pallet's primary code never changes after creation, even if a later
      upsert passes a differently-cased variant.
    - Upsert merge rule: UNSET fields never overwrite; explicit None clears.
    - New pallets are prepended (newest first).
"""

from __future__ import annotations

from typing import Any

from pallet_kernel.domain.records import (
    Pallet,
    PalletPatch,
    apply_pallet_patch,
    new_pallet,
    normalize_code,
)
from pallet_kernel.exceptions import PalletCodeRequiredError
from pallet_kernel.logging_config import LogContext, get_logger
from pallet_kernel.services.base import BaseRepository
from pallet_kernel.utils.ids import PALLET_PREFIX, generate_id

logger = get_logger("services.pallets")


def _find_index(pallets: list[Pallet], code: str) -> int:
    """Index of the pallet matching ``code``: primary codes first, then alternates."""
    norm = normalize_code(code)
    if not norm:
        return -1
    for idx, pallet in enumerate(pallets):
        if normalize_code(pallet.code) == norm:
            return idx
    for idx, pallet in enumerate(pallets):
        if normalize_code(pallet.alt_code) == norm:
            return idx
    return -1


class PalletRegistry(BaseRepository[Pallet]):
    """
    Repository for pallets.

    Handles lookup by code, create-or-merge upserts and deletion. The
    "lost" classification is not stored here; see domain/sightings.py.
    """

    def _decode(self, data: dict[str, Any]) -> Pallet:
        return Pallet.from_dict(data)

    def _encode(self, record: Pallet) -> dict[str, Any]:
        return record.to_dict()

    def list(self) -> list[Pallet]:
        """All pallets, newest first."""
        return self._load()

    def get(self, pallet_id: str) -> Pallet | None:
        for pallet in self._load():
            if pallet.id == pallet_id:
                return pallet
        return None

    def find_by_code(self, code: str) -> Pallet | None:
        """
        Find a pallet by primary or alternate code, ignoring case.

        Args:
            code: Pallet code as scanned or typed.

        Returns:
            The matching Pallet, or None (also for a blank code).
        """
        pallets = self._load()
        idx = _find_index(pallets, code)
        return pallets[idx] if idx >= 0 else None

    def upsert(self, patch: PalletPatch) -> Pallet:
        """
        Merge into the pallet matching ``patch.code``, or create it.

        Args:
            patch: Partial pallet keyed by code.

        Returns:
            The stored Pallet after the merge.

        Raises:
            PalletCodeRequiredError: If ``patch.code`` is blank.
        """
        if not normalize_code(patch.code):
            raise PalletCodeRequiredError()

        pallets = self._load()
        idx = _find_index(pallets, patch.code)

        with LogContext.bind(pallet_code=patch.code.strip()):
            if idx >= 0:
                pallet = apply_pallet_patch(pallets[idx], patch)
                pallets[idx] = pallet
                self._save(pallets)
                logger.debug(
                    "pallet_updated",
                    extra={"pallet_id": pallet.id, "fields": sorted(patch.supplied())},
                )
            else:
                pallet = new_pallet(generate_id(PALLET_PREFIX), patch)
                pallets.insert(0, pallet)
                self._save(pallets)
                logger.info("pallet_created", extra={"pallet_id": pallet.id})

        return pallet

    def remove(self, pallet_id: str) -> bool:
        """Delete a pallet by id. Returns False (not an error) if absent."""
        pallets = self._load()
        kept = [p for p in pallets if p.id != pallet_id]
        if len(kept) == len(pallets):
            return False
        self._save(kept)
        logger.info("pallet_removed", extra={"pallet_id": pallet_id})
        return True

    def count(self) -> int:
        return len(self._load())
