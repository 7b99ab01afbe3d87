"""
Pallet Kernel

A local, append-only pallet logistics tracker with:
- Location catalogs (depots, shops, drivers)
- Pallet registry with last-known state
- Bounded scan history
- Stock movement ledger with derived balances
"""

__version__ = "0.1.0"
