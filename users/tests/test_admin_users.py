from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

User = get_user_model()


class AdminUserManagementTests(TestCase):
    """
    GUARANTEES:
    - Only users.manage holders reach the endpoints
    - An admin cannot change their own status
    - Deleting staff deactivates instead of removing
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.ROLE_ADMIN)
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)
        self.customer = User.objects.create_user(email="cust@example.com", password="x")

    def test_staff_cannot_list_customers(self):
        self.client.force_authenticate(self.staff)
        res = self.client.get(reverse("users:admin-customer-list"))
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["error"]["code"], "FORBIDDEN")

    def test_admin_lists_customers_only(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("users:admin-customer-list"))
        self.assertEqual(res.status_code, 200)
        emails = [row["email"] for row in res.data["data"]]
        self.assertEqual(emails, ["cust@example.com"])
        self.assertEqual(res.data["meta"]["total"], 1)

    def test_admin_suspends_customer(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            reverse("users:admin-customer-change-status", args=[self.customer.id]),
            {"status": "suspended"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.status, User.STATUS_SUSPENDED)
        self.assertFalse(self.customer.is_active)

    def test_admin_cannot_change_own_status(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            reverse("users:admin-staff-change-status", args=[self.admin.id]),
            {"status": "inactive"},
            format="json",
        )
        self.assertEqual(res.status_code, 422)

    def test_create_staff(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            reverse("users:admin-staff-list"),
            {"email": "new.staff@example.com", "password": "Str0ng-pass!", "first_name": "New"},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        created = User.objects.get(email="new.staff@example.com")
        self.assertEqual(created.role, User.ROLE_STAFF)
        self.assertTrue(created.is_staff)

    def test_delete_staff_deactivates(self):
        self.client.force_authenticate(self.admin)
        res = self.client.delete(reverse("users:admin-staff-detail", args=[self.staff.id]))
        self.assertEqual(res.status_code, 200)
        self.staff.refresh_from_db()
        self.assertEqual(self.staff.status, User.STATUS_INACTIVE)
