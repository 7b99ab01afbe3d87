"""
Record id generation.

Ids are opaque strings with a readable prefix naming the collection they
belong to, e.g. ``stk_3f9c...`` for a stock movement or ``drv_...`` for a
driver. Prefixes are for humans reading exports; nothing parses them.
"""

from uuid import uuid4

MOVEMENT_PREFIX = "stk"
PALLET_PREFIX = "pallet"
SCAN_PREFIX = "scan"


def generate_id(prefix: str = "id") -> str:
    """
    Generate a fresh record id.

    Format: prefix_hex

    Example:
        >>> generate_id("stk")
        "stk_550e8400e29b41d4a716446655440000"
    """
    return f"{prefix}_{uuid4().hex}"
