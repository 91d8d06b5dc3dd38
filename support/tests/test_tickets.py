# support/tests/test_tickets.py

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from notifications.models import Notification
from orders.models import Order
from support.models import SupportTicket, TicketReply
from support.services import TicketClosedError, add_reply, cancel_ticket, open_ticket

User = get_user_model()


class TicketServiceTests(TestCase):
    """
    GUARANTEES:
    - opening a ticket notifies staff
    - a staff reply moves open to in_progress and notifies the customer
    - a customer reply reopens a resolved ticket
    - closed tickets take no replies
    """

    def setUp(self):
        self.customer = User.objects.create_user(email="cust@example.com", password="x")
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)
        self.ticket = open_ticket(self.customer, subject="Missing sausages", message="Only got half the order.")

    def test_open_notifies_staff(self):
        self.assertEqual(self.ticket.status, SupportTicket.STATUS_OPEN)
        self.assertEqual(self.ticket.priority, SupportTicket.PRIORITY_MEDIUM)
        self.assertTrue(Notification.objects.filter(user=self.staff, title="New support ticket").exists())

    def test_staff_reply(self):
        reply = add_reply(self.ticket, self.staff, "Sorry, we will send the rest today.")

        self.assertTrue(reply.is_staff_reply)
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.status, SupportTicket.STATUS_IN_PROGRESS)
        self.assertTrue(Notification.objects.filter(user=self.customer).exists())

    def test_customer_reply_reopens_resolved(self):
        SupportTicket.objects.filter(pk=self.ticket.pk).update(status=SupportTicket.STATUS_RESOLVED)

        reply = add_reply(self.ticket, self.customer, "Still missing.")

        self.assertFalse(reply.is_staff_reply)
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.status, SupportTicket.STATUS_OPEN)

    def test_closed_rejects_reply_and_cancel(self):
        cancel_ticket(self.ticket, self.customer)

        with self.assertRaises(TicketClosedError):
            add_reply(self.ticket, self.staff, "Hello?")
        with self.assertRaises(TicketClosedError):
            cancel_ticket(self.ticket, self.customer)
        self.assertFalse(TicketReply.objects.exists())


class CustomerTicketApiTests(TestCase):
    """
    GUARANTEES:
    - customers only see and touch their own tickets (others are 404)
    - a ticket may reference only the customer's own order
    - cancelling closes the ticket and records who cancelled it
    - staff accounts cannot use the customer ticket routes
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.customer = User.objects.create_user(email="cust@example.com", password="x")
        self.other = User.objects.create_user(email="other@example.com", password="x")
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)
        self.client.force_authenticate(self.customer)

    def test_create_with_own_order(self):
        order = Order.objects.create(user=self.customer)
        res = self.client.post(
            reverse("support:customer-tickets"),
            {"subject": "Late delivery", "message": "Where is it?", "order_id": str(order.id), "priority": "high"},
            format="json",
        )

        self.assertEqual(res.status_code, 201)
        data = res.data["data"]
        self.assertEqual(data["order_number"], order.order_number)
        self.assertEqual(data["priority"], "high")
        self.assertEqual(data["replies"], [])

    def test_create_with_foreign_order(self):
        order = Order.objects.create(user=self.other)
        res = self.client.post(
            reverse("support:customer-tickets"),
            {"subject": "Late delivery", "message": "Where is it?", "order_id": str(order.id)},
            format="json",
        )
        self.assertEqual(res.status_code, 404)
        self.assertFalse(SupportTicket.objects.exists())

    def test_list_and_detail_are_scoped(self):
        mine = open_ticket(self.customer, subject="Mine", message="x")
        theirs = open_ticket(self.other, subject="Theirs", message="x")

        res = self.client.get(reverse("support:customer-tickets"))
        self.assertEqual([row["id"] for row in res.data["data"]], [str(mine.id)])
        self.assertEqual(res.data["meta"]["total"], 1)

        res = self.client.get(reverse("support:customer-ticket-detail", args=[theirs.id]))
        self.assertEqual(res.status_code, 404)

    def test_status_filter(self):
        open_ticket(self.customer, subject="Open one", message="x")
        done = open_ticket(self.customer, subject="Done one", message="x")
        SupportTicket.objects.filter(pk=done.pk).update(status=SupportTicket.STATUS_RESOLVED)

        res = self.client.get(reverse("support:customer-tickets"), {"status": "resolved"})

        self.assertEqual([row["subject"] for row in res.data["data"]], ["Done one"])

    def test_reply_and_cancel(self):
        ticket = open_ticket(self.customer, subject="Wrong cut", message="Asked for rump")

        res = self.client.post(
            reverse("support:customer-ticket-reply", args=[ticket.id]), {"message": "Photo attached"}, format="json"
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["data"]["reply_count"], 1)

        res = self.client.delete(reverse("support:customer-ticket-detail", args=[ticket.id]))
        self.assertEqual(res.status_code, 200)
        ticket.refresh_from_db()
        self.assertEqual(ticket.status, SupportTicket.STATUS_CLOSED)
        self.assertTrue(ticket.cancelled_by_user)
        self.assertIsNotNone(ticket.cancelled_at)

        res = self.client.post(
            reverse("support:customer-ticket-reply", args=[ticket.id]), {"message": "One more"}, format="json"
        )
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "TICKET_CLOSED")

    def test_staff_cannot_use_customer_routes(self):
        self.client.force_authenticate(self.staff)
        self.assertEqual(self.client.get(reverse("support:customer-tickets")).status_code, 403)


class AdminTicketApiTests(TestCase):
    """
    GUARANTEES:
    - only tickets.manage holders reach the support desk
    - status changes notify the customer
    - stats count tickets by status and open priority
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.ROLE_ADMIN)
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)
        self.customer = User.objects.create_user(email="cust@example.com", password="x")
        self.ticket = open_ticket(
            self.customer, subject="Refund please", message="x", priority=SupportTicket.PRIORITY_URGENT
        )
        self.client.force_authenticate(self.admin)

    def test_staff_is_forbidden(self):
        self.client.force_authenticate(self.staff)
        self.assertEqual(self.client.get(reverse("support:admin-ticket-list")).status_code, 403)

    def test_list_filters(self):
        open_ticket(self.customer, subject="Question", message="x", priority=SupportTicket.PRIORITY_LOW)

        res = self.client.get(reverse("support:admin-ticket-list"), {"priority": "urgent"})

        self.assertEqual([row["subject"] for row in res.data["data"]], ["Refund please"])

    def test_reply_and_status(self):
        res = self.client.post(
            reverse("support:admin-ticket-reply", args=[self.ticket.id]), {"message": "On it"}, format="json"
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["data"]["status"], "in_progress")
        self.assertTrue(res.data["data"]["replies"][0]["is_staff_reply"])

        res = self.client.put(
            reverse("support:admin-ticket-change-status", args=[self.ticket.id]), {"status": "resolved"}, format="json"
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["status"], "resolved")
        self.assertTrue(Notification.objects.filter(user=self.customer, title="Support ticket resolved").exists())

    def test_stats(self):
        closed = open_ticket(self.customer, subject="Old", message="x")
        cancel_ticket(closed, self.customer)

        res = self.client.get(reverse("support:admin-ticket-stats"))

        data = res.data["data"]
        self.assertEqual(data["total"], 2)
        self.assertEqual(data["by_status"]["open"], 1)
        self.assertEqual(data["by_status"]["closed"], 1)
        self.assertEqual(data["open_by_priority"]["urgent"], 1)
        self.assertEqual(data["cancelled_by_customers"], 1)

    def test_delete(self):
        res = self.client.delete(reverse("support:admin-ticket-detail", args=[self.ticket.id]))
        self.assertEqual(res.status_code, 200)
        self.assertFalse(SupportTicket.objects.exists())
