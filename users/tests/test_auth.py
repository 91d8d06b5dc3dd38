from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

User = get_user_model()


class RegistrationAndLoginTests(TestCase):
    """
    GUARANTEES:
    - Registration always creates a customer, whatever role is posted
    - Wrong credentials are a 422 on the email field
    - Suspended / inactive accounts are refused with stable codes
    - Successful login returns a JWT pair and stamps last_login
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email="buyer@example.com",
            password="Str0ng-pass!",
            first_name="Tendai",
        )

    def test_register_creates_customer_and_returns_tokens(self):
        res = self.client.post(
            reverse("users:register"),
            {
                "email": "New@Example.com",
                "password": "An0ther-pass!",
                "first_name": "Rudo",
                "role": "admin",
            },
            format="json",
        )

        self.assertEqual(res.status_code, 201)
        self.assertTrue(res.data["success"])
        self.assertIn("access", res.data["data"]["tokens"])

        created = User.objects.get(email="new@example.com")
        self.assertEqual(created.role, User.ROLE_CUSTOMER)

    def test_register_duplicate_email_is_422(self):
        res = self.client.post(
            reverse("users:register"),
            {"email": "BUYER@example.com", "password": "An0ther-pass!"},
            format="json",
        )
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")
        self.assertIn("email", res.data["errors"])

    def test_login_with_wrong_password_is_422(self):
        res = self.client.post(
            reverse("users:login"),
            {"email": "buyer@example.com", "password": "nope"},
            format="json",
        )
        self.assertEqual(res.status_code, 422)
        self.assertIn("email", res.data["errors"])

    def test_login_success_returns_tokens(self):
        res = self.client.post(
            reverse("users:login"),
            {"email": "buyer@example.com", "password": "Str0ng-pass!"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertIn("refresh", res.data["data"]["tokens"])

        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_login)

    def test_suspended_account_cannot_login(self):
        self.user.status = User.STATUS_SUSPENDED
        self.user.save()

        res = self.client.post(
            reverse("users:login"),
            {"email": "buyer@example.com", "password": "Str0ng-pass!"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["error"]["code"], "ACCOUNT_SUSPENDED")

    def test_inactive_account_cannot_login(self):
        self.user.status = User.STATUS_INACTIVE
        self.user.save()

        res = self.client.post(
            reverse("users:login"),
            {"email": "buyer@example.com", "password": "Str0ng-pass!"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["error"]["code"], "ACCOUNT_INACTIVE")

    def test_status_drives_is_active(self):
        self.user.status = User.STATUS_SUSPENDED
        self.user.save()
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_active)


class SessionEndpointTests(TestCase):
    """
    GUARANTEES:
    - Logout blacklists the refresh token (refresh then fails)
    - check-email reports availability
    - forgot-password always answers 200 and only mails real accounts
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="Str0ng-pass!")

    def _login(self):
        res = self.client.post(
            reverse("users:login"),
            {"email": "buyer@example.com", "password": "Str0ng-pass!"},
            format="json",
        )
        return res.data["data"]["tokens"]

    def test_logout_blacklists_refresh_token(self):
        tokens = self._login()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        res = self.client.post(reverse("users:logout"), {"refresh": tokens["refresh"]}, format="json")
        self.assertEqual(res.status_code, 200)

        self.client.credentials()
        res = self.client.post(reverse("users:token-refresh"), {"refresh": tokens["refresh"]}, format="json")
        self.assertEqual(res.status_code, 401)

    def test_current_user_requires_auth(self):
        res = self.client.get(reverse("users:current-user"))
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["error"]["code"], "UNAUTHENTICATED")

    def test_check_email(self):
        res = self.client.post(reverse("users:check-email"), {"email": "buyer@example.com"}, format="json")
        self.assertFalse(res.data["data"]["available"])

        res = self.client.post(reverse("users:check-email"), {"email": "free@example.com"}, format="json")
        self.assertTrue(res.data["data"]["available"])

    def test_forgot_password_only_mails_known_accounts(self):
        res = self.client.post(reverse("users:forgot-password"), {"email": "ghost@example.com"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(mail.outbox), 0)

        res = self.client.post(reverse("users:forgot-password"), {"email": "buyer@example.com"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("reset-password?uid=", mail.outbox[0].body)

    def test_reset_password_with_bad_token_is_422(self):
        res = self.client.post(
            reverse("users:reset-password"),
            {"uid": "bogus", "token": "bogus", "password": "N3w-password!"},
            format="json",
        )
        self.assertEqual(res.status_code, 422)
