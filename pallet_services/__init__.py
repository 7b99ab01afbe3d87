"""
pallet_services -- Package init and public API.

Responsibility:
    Composition of kernel services with settings and storage. This is the
    only layer that reads ``pallet_config`` and chooses a concrete store.

Architecture position:
    Services -- above the kernel.

    Dependency direction (enforced by tests/architecture/test_kernel_boundary.py):
        pallet_services/ -> pallet_kernel/  (allowed)
        pallet_services/ -> pallet_config/  (allowed)
        pallet_kernel/   -> pallet_services/ (FORBIDDEN)
        pallet_kernel/   -> pallet_config/   (FORBIDDEN)
"""

from pallet_services.tracker import PalletTracker, build_tracker

__all__ = [
    "PalletTracker",
    "build_tracker",
]
