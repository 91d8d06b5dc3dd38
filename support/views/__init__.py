from .admin import AdminTicketViewSet
from .customer import CustomerTicketDetailView, CustomerTicketListView, CustomerTicketReplyView

__all__ = [
    "AdminTicketViewSet",
    "CustomerTicketDetailView",
    "CustomerTicketListView",
    "CustomerTicketReplyView",
]
