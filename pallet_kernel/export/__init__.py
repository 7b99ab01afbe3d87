"""Exports - CSV rendering of tracker views."""

from pallet_kernel.export.csv_export import (
    lost_pallets_csv,
    movements_csv,
    render_csv,
    stock_csv,
    write_csv,
)

__all__ = [
    "lost_pallets_csv",
    "movements_csv",
    "render_csv",
    "stock_csv",
    "write_csv",
]
