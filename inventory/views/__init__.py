from .stock import (
    AdjustStockView,
    InventoryDashboardView,
    InventoryDetailView,
    InventoryExportView,
    InventoryHistoryView,
    InventoryListView,
    InventoryReportView,
    LowStockView,
    MinStockView,
    ReceiveStockView,
    StockAlertsView,
)
from .waste import WasteListCreateView, WasteReviewView

__all__ = [
    "AdjustStockView",
    "InventoryDashboardView",
    "InventoryDetailView",
    "InventoryExportView",
    "InventoryHistoryView",
    "InventoryListView",
    "InventoryReportView",
    "LowStockView",
    "MinStockView",
    "ReceiveStockView",
    "StockAlertsView",
    "WasteListCreateView",
    "WasteReviewView",
]
