# orders/urls.py

"""
ORDERS URLS (mounted at /api/v1/)

customer/...     own orders, invoice PDF
staff/...        fulfilment queue, read-only invoices
admin/...        management, invoices
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from orders.views import (
    AdminDashboardView,
    AdminInvoiceViewSet,
    AdminOrderViewSet,
    CustomerCancelOrderView,
    CustomerDashboardView,
    CustomerInvoicePdfView,
    CustomerInvoiceView,
    CustomerOrderDetailView,
    CustomerOrderListView,
    CustomerReorderView,
    OrderStatusView,
    StaffDashboardView,
    StaffInvoiceViewSet,
    StaffOrderDetailView,
    StaffOrderListView,
    StaffOrderNoteView,
    StaffOutForDeliveryView,
    StaffPickedUpView,
    StaffTodayDeliveriesView,
    StaffTodayPickupsView,
)

app_name = "orders"

router = SimpleRouter()
router.register(r"admin/orders", AdminOrderViewSet, basename="admin-order")
router.register(r"admin/invoices", AdminInvoiceViewSet, basename="admin-invoice")
router.register(r"staff/invoices", StaffInvoiceViewSet, basename="staff-invoice")

urlpatterns = [
    # customer
    path("customer/dashboard/", CustomerDashboardView.as_view(), name="customer-dashboard"),
    path("customer/orders/", CustomerOrderListView.as_view(), name="customer-orders"),
    path("customer/orders/<uuid:order_id>/", CustomerOrderDetailView.as_view(), name="customer-order-detail"),
    path("customer/orders/<uuid:order_id>/cancel/", CustomerCancelOrderView.as_view(), name="customer-order-cancel"),
    path("customer/orders/<uuid:order_id>/reorder/", CustomerReorderView.as_view(), name="customer-order-reorder"),
    path("customer/orders/<uuid:order_id>/invoice/", CustomerInvoiceView.as_view(), name="customer-order-invoice"),
    path(
        "customer/orders/<uuid:order_id>/invoice/pdf/",
        CustomerInvoicePdfView.as_view(),
        name="customer-order-invoice-pdf",
    ),
    # staff
    path("staff/dashboard/", StaffDashboardView.as_view(), name="staff-dashboard"),
    path("staff/orders/", StaffOrderListView.as_view(), name="staff-orders"),
    path("staff/orders/<uuid:order_id>/", StaffOrderDetailView.as_view(), name="staff-order-detail"),
    path("staff/orders/<uuid:order_id>/status/", OrderStatusView.as_view(), name="staff-order-status"),
    path("staff/orders/<uuid:order_id>/notes/", StaffOrderNoteView.as_view(), name="staff-order-notes"),
    path(
        "staff/orders/<uuid:order_id>/out-for-delivery/",
        StaffOutForDeliveryView.as_view(),
        name="staff-order-out-for-delivery",
    ),
    path("staff/orders/<uuid:order_id>/picked-up/", StaffPickedUpView.as_view(), name="staff-order-picked-up"),
    path("staff/deliveries/today/", StaffTodayDeliveriesView.as_view(), name="staff-deliveries-today"),
    path("staff/pickups/today/", StaffTodayPickupsView.as_view(), name="staff-pickups-today"),
    # admin
    path("admin/dashboard/", AdminDashboardView.as_view(), name="admin-dashboard"),
    path("", include(router.urls)),
]
