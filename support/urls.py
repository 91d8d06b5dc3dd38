# support/urls.py

"""
SUPPORT URLS (mounted at /api/v1/)

customer/tickets/...   own tickets
admin/tickets/...      support desk
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from support.views import (
    AdminTicketViewSet,
    CustomerTicketDetailView,
    CustomerTicketListView,
    CustomerTicketReplyView,
)

app_name = "support"

router = SimpleRouter()
router.register(r"admin/tickets", AdminTicketViewSet, basename="admin-ticket")

urlpatterns = [
    path("customer/tickets/", CustomerTicketListView.as_view(), name="customer-tickets"),
    path("customer/tickets/<uuid:ticket_id>/", CustomerTicketDetailView.as_view(), name="customer-ticket-detail"),
    path("customer/tickets/<uuid:ticket_id>/reply/", CustomerTicketReplyView.as_view(), name="customer-ticket-reply"),
    path("", include(router.urls)),
]
