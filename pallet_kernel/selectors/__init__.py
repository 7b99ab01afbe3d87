"""Selectors - read-only views over the registries and the ledger."""

from pallet_kernel.selectors.pallet_selector import (
    DashboardSummary,
    LostPalletLine,
    PalletSelector,
)
from pallet_kernel.selectors.stock_selector import (
    LocationStock,
    MovementLine,
    StockSelector,
)

__all__ = [
    "DashboardSummary",
    "LostPalletLine",
    "PalletSelector",
    "LocationStock",
    "MovementLine",
    "StockSelector",
]
