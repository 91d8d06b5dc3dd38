from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from store.models import Setting, SettingHistory
from store.services import settings as site_settings

User = get_user_model()


class SettingsServiceTests(TestCase):
    """
    GUARANTEES:
    - Registry defaults apply until a row is written
    - Values are cast by declared type
    - Writes invalidate the cache and record history
    - Unknown keys and wrongly typed values are rejected as a whole
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.ROLE_ADMIN)

    def test_defaults(self):
        self.assertEqual(site_settings.minimum_order_amount(), Decimal("100.00"))
        self.assertEqual(site_settings.free_delivery_threshold(), Decimal("100.00"))
        self.assertEqual(site_settings.default_delivery_fee(), Decimal("10.00"))
        self.assertTrue(site_settings.cod_enabled())
        self.assertEqual(site_settings.cod_max_amount(), Decimal("500.00"))
        self.assertEqual(site_settings.store_name(), "Zambezi Meats")

    def test_update_group_casts_and_records_history(self):
        site_settings.get_setting("minimum_order_amount")  # warm the cache

        changed = site_settings.update_group(
            "delivery",
            {"minimum_order_amount": "75.50", "pickup_enabled": "false"},
            user=self.admin,
        )

        self.assertEqual(sorted(changed), ["minimum_order_amount", "pickup_enabled"])
        self.assertEqual(site_settings.minimum_order_amount(), Decimal("75.50"))
        self.assertFalse(site_settings.pickup_enabled())

        row = Setting.objects.get(key="minimum_order_amount")
        self.assertEqual(row.type, Setting.TYPE_FLOAT)
        self.assertEqual(row.updated_by, self.admin)
        history = SettingHistory.objects.get(setting=row)
        self.assertEqual(history.new_value, "75.50")

    def test_unchanged_value_writes_no_history(self):
        site_settings.update_group("store", {"store_name": "Zambezi"}, user=self.admin)
        changed = site_settings.update_group("store", {"store_name": "Zambezi"}, user=self.admin)
        self.assertEqual(changed, [])
        self.assertEqual(SettingHistory.objects.count(), 1)

    def test_bad_values_reject_whole_update(self):
        with self.assertRaises(site_settings.SettingsValidationError) as ctx:
            site_settings.update_group(
                "security",
                {"max_login_attempts": "many", "session_timeout_minutes": 30},
            )
        self.assertIn("max_login_attempts", ctx.exception.errors)
        self.assertFalse(Setting.objects.exists())

    def test_key_from_another_group_is_unknown(self):
        with self.assertRaises(site_settings.SettingsValidationError) as ctx:
            site_settings.update_group("store", {"cod_enabled": True})
        self.assertIn("cod_enabled", ctx.exception.errors)

    def test_json_values(self):
        site_settings.update_group("operating", {"delivery_slots": ["09:00-11:00"]})
        self.assertEqual(site_settings.delivery_slots(), ["09:00-11:00"])

    def test_history_is_immutable(self):
        site_settings.update_group("store", {"store_phone": "0400 000 000"})
        history = SettingHistory.objects.get()
        with self.assertRaises(ValidationError):
            history.save()


class SettingsApiTests(TestCase):
    """
    GUARANTEES:
    - Public endpoint exposes public keys only, no auth
    - Admin endpoints need settings.manage
    - Unknown group -> 404; invalid values -> 422 with per-key errors
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.ROLE_ADMIN)
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)

    def test_public_settings(self):
        res = self.client.get(reverse("store:public-settings"))
        self.assertEqual(res.status_code, 200)
        self.assertIn("minimum_order_amount", res.data["data"])
        self.assertNotIn("max_login_attempts", res.data["data"])

    def test_staff_forbidden(self):
        self.client.force_authenticate(self.staff)
        res = self.client.get(reverse("store:settings"))
        self.assertEqual(res.status_code, 403)

    def test_admin_reads_all_groups(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("store:settings"))
        self.assertEqual(res.status_code, 200)
        self.assertIn("payment", res.data["data"])
        self.assertTrue(res.data["data"]["payment"]["cod_enabled"])

    def test_unknown_group_404(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("store:settings-group", args=["nope"]))
        self.assertEqual(res.status_code, 404)

    def test_update_group(self):
        self.client.force_authenticate(self.admin)
        res = self.client.put(
            reverse("store:settings-group", args=["payment"]),
            {"settings": {"cod_max_amount": 250, "paypal_enabled": True}},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["cod_max_amount"], 250.0)
        self.assertEqual(site_settings.cod_max_amount(), Decimal("250.00"))

    def test_update_group_invalid(self):
        self.client.force_authenticate(self.admin)
        res = self.client.put(
            reverse("store:settings-group", args=["payment"]),
            {"settings": {"cod_max_amount": "lots", "mystery": 1}},
            format="json",
        )
        self.assertEqual(res.status_code, 422)
        self.assertIn("cod_max_amount", res.data["errors"])
        self.assertIn("mystery", res.data["errors"])

    def test_export_import_and_history(self):
        self.client.force_authenticate(self.admin)

        res = self.client.post(
            reverse("store:settings-import"),
            {"settings": {"store_name": "Zambezi Butchery", "wishlist_enabled": False}},
            format="json",
        )
        self.assertEqual(res.status_code, 200)

        res = self.client.get(reverse("store:settings-export"))
        self.assertEqual(res.data["data"]["store_name"], "Zambezi Butchery")
        self.assertFalse(res.data["data"]["wishlist_enabled"])

        res = self.client.get(reverse("store:settings-history"), {"key": "store_name"})
        self.assertEqual(res.data["meta"]["total"], 1)
        self.assertEqual(res.data["data"][0]["new_value"], "Zambezi Butchery")
