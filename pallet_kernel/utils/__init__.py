"""Utility modules for the pallet kernel."""

from pallet_kernel.utils.ids import generate_id

__all__ = [
    "generate_id",
]
