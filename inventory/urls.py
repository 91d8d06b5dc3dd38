# inventory/urls.py

from django.urls import path

from inventory.views import (
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
    WasteListCreateView,
    WasteReviewView,
)

app_name = "inventory"

urlpatterns = [
    path("", InventoryListView.as_view(), name="list"),
    path("dashboard/", InventoryDashboardView.as_view(), name="dashboard"),
    path("history/", InventoryHistoryView.as_view(), name="history"),
    path("low-stock/", LowStockView.as_view(), name="low-stock"),
    path("alerts/", StockAlertsView.as_view(), name="alerts"),
    path("report/", InventoryReportView.as_view(), name="report"),
    path("export/", InventoryExportView.as_view(), name="export"),
    path("waste/", WasteListCreateView.as_view(), name="waste"),
    path("waste/<uuid:waste_id>/review/", WasteReviewView.as_view(), name="waste-review"),
    path("<uuid:product_id>/", InventoryDetailView.as_view(), name="detail"),
    path("<uuid:product_id>/receive/", ReceiveStockView.as_view(), name="receive"),
    path("<uuid:product_id>/adjust/", AdjustStockView.as_view(), name="adjust"),
    path("<uuid:product_id>/min-stock/", MinStockView.as_view(), name="min-stock"),
]
