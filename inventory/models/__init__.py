from .inventory_log import InventoryLog
from .waste_log import WasteLog

__all__ = ["InventoryLog", "WasteLog"]
