"""
CSV export of stock balances, movements and lost pallets.

Uses csv.writer with QUOTE_MINIMAL: a field containing a double quote, a
comma or a line break is wrapped in double quotes with inner quotes
doubled. ``None`` renders as an empty field. Every line, the last
included, ends with "\\n".
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from pallet_kernel.domain.values import quantity_to_str, to_iso
from pallet_kernel.selectors.pallet_selector import LostPalletLine
from pallet_kernel.selectors.stock_selector import LocationStock, MovementLine

STOCK_HEADERS = ("kind", "id", "name", "palletType", "qty")
MOVEMENT_HEADERS = (
    "ts",
    "palletType",
    "qty",
    "fromKind",
    "fromId",
    "fromName",
    "toKind",
    "toId",
    "toName",
    "note",
)
LOST_PALLET_HEADERS = (
    "code",
    "type",
    "lastLocKind",
    "lastLocId",
    "lastLocName",
    "lastSeen",
    "daysSinceSeen",
)


def render_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    """Render a header row and data rows as CSV text."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(row)
    return buf.getvalue()


def _ts(value: datetime | None) -> str:
    return to_iso(value) if value is not None else ""


def stock_csv(groups: Iterable[LocationStock]) -> str:
    """Balances, one line per (location, pallet type)."""
    return render_csv(
        STOCK_HEADERS,
        (
            (g.kind.value, g.id, g.name, r.pallet_type, quantity_to_str(r.quantity))
            for g in groups
            for r in g.rows
        ),
    )


def movements_csv(lines: Iterable[MovementLine]) -> str:
    """Movements with resolved location names, most recent first."""
    return render_csv(
        MOVEMENT_HEADERS,
        (
            (
                _ts(line.movement.ts),
                line.movement.pallet_type,
                quantity_to_str(line.movement.quantity),
                line.movement.from_.kind.value,
                line.movement.from_.id,
                line.from_name,
                line.movement.to.kind.value,
                line.movement.to.id,
                line.to_name,
                line.movement.note,
            )
            for line in lines
        ),
    )


def lost_pallets_csv(lines: Iterable[LostPalletLine]) -> str:
    """Lost pallets with their last declared location."""
    return render_csv(
        LOST_PALLET_HEADERS,
        (
            (
                line.pallet.code,
                line.pallet.type,
                line.pallet.last_loc_kind.value if line.pallet.last_loc_kind else None,
                line.pallet.last_loc_id,
                line.last_location_name,
                _ts(line.pallet.last_seen_at),
                line.days_since_seen,
            )
            for line in lines
        ),
    )


def write_csv(path: Path, text: str) -> None:
    """Write CSV text as UTF-8."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
