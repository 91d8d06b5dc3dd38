from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from notifications.models import Notification
from notifications.services import notify, notify_staff

User = get_user_model()


class NotificationApiTests(TestCase):
    """
    GUARANTEES:
    - Users only see and touch their own notifications
    - unread filter and unread_count agree
    - read / read-all stamp read_at
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="cust@example.com", password="x")
        self.other = User.objects.create_user(email="other@example.com", password="x")

        self.first = notify(self.user, type=Notification.TYPE_ORDER_PLACED, title="Order placed")
        self.second = notify(self.user, type=Notification.TYPE_ORDER_STATUS, title="Order confirmed")
        self.foreign = notify(self.other, type=Notification.TYPE_SYSTEM, title="Hello")

        self.client.force_authenticate(self.user)

    def test_list_is_owner_scoped(self):
        res = self.client.get(reverse("notifications:notification-list"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["meta"]["total"], 2)
        self.assertEqual(res.data["unread_count"], 2)

    def test_unread_filter(self):
        self.first.mark_read()
        res = self.client.get(reverse("notifications:notification-list"), {"unread": "true"})
        self.assertEqual([row["title"] for row in res.data["data"]], ["Order confirmed"])

    def test_unread_count(self):
        res = self.client.get(reverse("notifications:notification-unread-count"))
        self.assertEqual(res.data["data"]["count"], 2)

    def test_mark_read(self):
        res = self.client.post(reverse("notifications:notification-mark-read", args=[self.first.id]))
        self.assertEqual(res.status_code, 200)
        self.first.refresh_from_db()
        self.assertTrue(self.first.is_read)

    def test_cannot_read_foreign_notification(self):
        res = self.client.post(reverse("notifications:notification-mark-read", args=[self.foreign.id]))
        self.assertEqual(res.status_code, 404)

    def test_mark_all_read(self):
        res = self.client.post(reverse("notifications:notification-mark-all-read"))
        self.assertEqual(res.data["data"]["updated"], 2)
        self.assertFalse(Notification.objects.filter(user=self.user, read_at__isnull=True).exists())
        self.assertTrue(Notification.objects.filter(user=self.other, read_at__isnull=True).exists())

    def test_delete(self):
        res = self.client.delete(reverse("notifications:notification-detail", args=[self.second.id]))
        self.assertEqual(res.status_code, 200)
        self.assertFalse(Notification.objects.filter(id=self.second.id).exists())


class NotifyStaffTests(TestCase):
    def test_only_active_staff_receive(self):
        User.objects.create_user(email="admin@example.com", password="x", role=User.ROLE_ADMIN)
        User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)
        User.objects.create_user(
            email="gone@example.com", password="x", role=User.ROLE_STAFF, status=User.STATUS_INACTIVE
        )
        User.objects.create_user(email="cust@example.com", password="x")

        sent = notify_staff(type=Notification.TYPE_STOCK_ALERT, title="Low stock")

        self.assertEqual(sent, 2)
        self.assertEqual(Notification.objects.count(), 2)
