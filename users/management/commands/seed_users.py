# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_STAFF


@dataclass(frozen=True)
class SeedUserSpec:
    label: str
    role: str
    email: str
    first_name: str = ""
    last_name: str = ""


SEED_USERS = [
    SeedUserSpec("Admin", ROLE_ADMIN, "admin@zambezimeats.com.au", "Store", "Admin"),
    SeedUserSpec("Staff", ROLE_STAFF, "staff@zambezimeats.com.au", "Butcher", "Staff"),
    SeedUserSpec("Customer", ROLE_CUSTOMER, "customer@example.com", "Test", "Customer"),
]


class Command(BaseCommand):
    help = "Seed one admin, one staff member and one customer (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if not password or len(password) < 8:
            raise CommandError("--password must be at least 8 characters.")

        User = get_user_model()

        created_count = 0
        updated_count = 0
        pw_reset_count = 0

        for spec in SEED_USERS:
            is_admin = spec.role == ROLE_ADMIN
            is_staff = spec.role in {ROLE_ADMIN, ROLE_STAFF}

            user = User.objects.filter(email__iexact=spec.email).first()
            created = user is None

            if created:
                user = User.objects.create_user(
                    email=spec.email,
                    password=password,
                    first_name=spec.first_name,
                    last_name=spec.last_name,
                    role=spec.role,
                    is_staff=is_staff,
                    is_superuser=is_admin,
                )
                created_count += 1
                self.stdout.write(f"created: {spec.label} ({spec.role}) -> {spec.email}")
                continue

            dirty = False

            # Keep aligned with desired seed spec
            for field, value in (
                ("role", spec.role),
                ("is_staff", is_staff),
                ("is_superuser", is_admin),
                ("status", User.STATUS_ACTIVE),
            ):
                if getattr(user, field) != value:
                    setattr(user, field, value)
                    dirty = True

            if force_password:
                user.set_password(password)
                dirty = True
                pw_reset_count += 1

            if dirty:
                user.save()
                updated_count += 1

            self.stdout.write(f"exists:  {spec.label} ({spec.role}) -> {spec.email}")

        self.stdout.write("\n--- Summary ---")
        self.stdout.write(f"Created: {created_count}")
        self.stdout.write(f"Updated: {updated_count}")
        if force_password:
            self.stdout.write(f"Passwords reset: {pw_reset_count}")
