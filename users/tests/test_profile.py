from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from users.models import Address

User = get_user_model()


class AddressTests(TestCase):
    """
    GUARANTEES:
    - A user's first address becomes default
    - Marking another address default clears the old one
    - Another user's address is invisible (404)
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="a@example.com", password="Str0ng-pass!")
        self.other = User.objects.create_user(email="b@example.com", password="Str0ng-pass!")
        self.client.force_authenticate(self.user)

    def _payload(self, **overrides):
        data = {
            "label": "Home",
            "street": "1 George St",
            "suburb": "Parramatta",
            "state": "NSW",
            "postcode": "2150",
        }
        data.update(overrides)
        return data

    def test_first_address_is_default(self):
        res = self.client.post(reverse("users:address-list"), self._payload(), format="json")
        self.assertEqual(res.status_code, 201)
        self.assertTrue(res.data["data"]["is_default"])

    def test_set_default_moves_flag(self):
        first = Address.objects.create(user=self.user, street="1 A St", suburb="Ryde", state="NSW", postcode="2112")
        second = Address.objects.create(user=self.user, street="2 B St", suburb="Ryde", state="NSW", postcode="2112")

        res = self.client.post(reverse("users:address-make-default", args=[second.id]))
        self.assertEqual(res.status_code, 200)

        first.refresh_from_db()
        second.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertTrue(second.is_default)

    def test_invalid_postcode_is_422(self):
        res = self.client.post(reverse("users:address-list"), self._payload(postcode="21"), format="json")
        self.assertEqual(res.status_code, 422)

    def test_cannot_see_other_users_address(self):
        foreign = Address.objects.create(user=self.other, street="9 Z St", suburb="Ryde", state="NSW", postcode="2112")
        res = self.client.get(reverse("users:address-detail", args=[foreign.id]))
        self.assertEqual(res.status_code, 404)


class ProfileTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="a@example.com", password="Str0ng-pass!")
        self.client.force_authenticate(self.user)

    def test_patch_profile(self):
        res = self.client.patch(reverse("users:profile"), {"phone": "0400000000"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.phone, "0400000000")

    def test_change_password_requires_current(self):
        res = self.client.post(
            reverse("users:change-password"),
            {"current_password": "wrong", "new_password": "N3w-password!"},
            format="json",
        )
        self.assertEqual(res.status_code, 422)

        res = self.client.post(
            reverse("users:change-password"),
            {"current_password": "Str0ng-pass!", "new_password": "N3w-password!"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("N3w-password!"))
