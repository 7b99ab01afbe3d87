"""Services - repositories, the stock ledger and scan orchestration."""

from pallet_kernel.services.location_registry import LocationCatalog, LocationRegistry
from pallet_kernel.services.pallet_registry import PalletRegistry
from pallet_kernel.services.scan_log import ScanLog
from pallet_kernel.services.scan_service import ScanService
from pallet_kernel.services.stock_ledger import StockLedger

__all__ = [
    "LocationCatalog",
    "LocationRegistry",
    "PalletRegistry",
    "ScanLog",
    "ScanService",
    "StockLedger",
]
