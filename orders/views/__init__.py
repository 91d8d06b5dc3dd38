from .admin import AdminDashboardView, AdminOrderViewSet
from .customer import (
    CustomerCancelOrderView,
    CustomerDashboardView,
    CustomerInvoicePdfView,
    CustomerInvoiceView,
    CustomerOrderDetailView,
    CustomerOrderListView,
    CustomerReorderView,
)
from .invoices import AdminInvoiceViewSet, StaffInvoiceViewSet
from .staff import (
    OrderStatusView,
    StaffDashboardView,
    StaffOrderDetailView,
    StaffOrderListView,
    StaffOrderNoteView,
    StaffOutForDeliveryView,
    StaffPickedUpView,
    StaffTodayDeliveriesView,
    StaffTodayPickupsView,
)

__all__ = [
    "AdminDashboardView",
    "AdminInvoiceViewSet",
    "AdminOrderViewSet",
    "CustomerCancelOrderView",
    "CustomerDashboardView",
    "CustomerInvoicePdfView",
    "CustomerInvoiceView",
    "CustomerOrderDetailView",
    "CustomerOrderListView",
    "CustomerReorderView",
    "OrderStatusView",
    "StaffDashboardView",
    "StaffInvoiceViewSet",
    "StaffOrderDetailView",
    "StaffOrderListView",
    "StaffOrderNoteView",
    "StaffOutForDeliveryView",
    "StaffPickedUpView",
    "StaffTodayDeliveriesView",
    "StaffTodayPickupsView",
]
