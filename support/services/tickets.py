# support/services/tickets.py

"""
SUPPORT TICKETS

GUARANTEES:
- Closed tickets take no replies and cannot be cancelled again
- A customer reply reopens a resolved ticket
- A staff reply moves an open ticket to in_progress
- Customers hear about staff replies and status changes; staff hear about
  new tickets, customer replies and cancellations
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from notifications.models import Notification
from notifications.services import notify, notify_staff
from support.models import SupportTicket, TicketReply

logger = logging.getLogger(__name__)


class TicketError(Exception):
    code = "TICKET_ERROR"


class TicketClosedError(TicketError):
    code = "TICKET_CLOSED"


def _ticket_data(ticket: SupportTicket) -> dict:
    return {"ticket_id": str(ticket.pk), "status": ticket.status}


@transaction.atomic
def open_ticket(user, *, subject: str, message: str, order=None, priority: str = SupportTicket.PRIORITY_MEDIUM):
    ticket = SupportTicket.objects.create(
        user=user, order=order, subject=subject, message=message, priority=priority
    )
    notify_staff(
        type=Notification.TYPE_SYSTEM,
        title="New support ticket",
        message=f"{user.full_name}: {subject}",
        data=_ticket_data(ticket),
    )
    logger.info("Support ticket opened", extra={"ticket_id": str(ticket.pk), "user_id": str(user.pk)})
    return ticket


@transaction.atomic
def add_reply(ticket: SupportTicket, user, message: str) -> TicketReply:
    ticket = SupportTicket.objects.select_for_update().get(pk=ticket.pk)
    if ticket.is_closed:
        raise TicketClosedError("This ticket is closed and cannot receive replies.")

    reply = TicketReply.objects.create(ticket=ticket, user=user, message=message)

    if reply.is_staff_reply:
        if ticket.status == SupportTicket.STATUS_OPEN:
            ticket.status = SupportTicket.STATUS_IN_PROGRESS
        notify(
            ticket.user,
            type=Notification.TYPE_SYSTEM,
            title="New reply to your support ticket",
            message=ticket.subject,
            data=_ticket_data(ticket),
        )
    else:
        if ticket.status == SupportTicket.STATUS_RESOLVED:
            ticket.status = SupportTicket.STATUS_OPEN
        notify_staff(
            type=Notification.TYPE_SYSTEM,
            title="Customer replied to a ticket",
            message=ticket.subject,
            data=_ticket_data(ticket),
        )

    # touches updated_at even when the status is unchanged
    ticket.save(update_fields=["status", "updated_at"])
    return reply


@transaction.atomic
def set_ticket_status(ticket: SupportTicket, new_status: str, *, user=None) -> SupportTicket:
    ticket = SupportTicket.objects.select_for_update().get(pk=ticket.pk)
    if new_status == ticket.status:
        return ticket

    ticket.status = new_status
    ticket.save(update_fields=["status", "updated_at"])
    notify(
        ticket.user,
        type=Notification.TYPE_SYSTEM,
        title=f"Support ticket {ticket.get_status_display().lower()}",
        message=ticket.subject,
        data=_ticket_data(ticket),
    )
    logger.info(
        "Support ticket status changed",
        extra={"ticket_id": str(ticket.pk), "status": new_status, "by": str(user.pk) if user else None},
    )
    return ticket


@transaction.atomic
def cancel_ticket(ticket: SupportTicket, user) -> SupportTicket:
    ticket = SupportTicket.objects.select_for_update().get(pk=ticket.pk)
    if ticket.is_closed:
        raise TicketClosedError("This ticket is already closed.")

    ticket.status = SupportTicket.STATUS_CLOSED
    ticket.cancelled_at = timezone.now()
    ticket.cancelled_by_user = True
    ticket.save(update_fields=["status", "cancelled_at", "cancelled_by_user", "updated_at"])

    notify_staff(
        type=Notification.TYPE_SYSTEM,
        title="Support ticket cancelled by customer",
        message=ticket.subject,
        data=_ticket_data(ticket),
    )
    logger.info("Support ticket cancelled", extra={"ticket_id": str(ticket.pk), "user_id": str(user.pk)})
    return ticket


def ticket_stats() -> dict:
    by_status = dict(SupportTicket.objects.order_by().values_list("status").annotate(n=Count("id")))
    open_statuses = [SupportTicket.STATUS_OPEN, SupportTicket.STATUS_IN_PROGRESS]
    by_priority = dict(
        SupportTicket.objects.filter(status__in=open_statuses)
        .order_by()
        .values_list("priority")
        .annotate(n=Count("id"))
    )
    return {
        "total": sum(by_status.values()),
        "by_status": {value: by_status.get(value, 0) for value, _ in SupportTicket.STATUS_CHOICES},
        "open_by_priority": {value: by_priority.get(value, 0) for value, _ in SupportTicket.PRIORITY_CHOICES},
        "cancelled_by_customers": SupportTicket.objects.filter(cancelled_by_user=True).count(),
    }
