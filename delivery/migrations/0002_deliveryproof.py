"""
PATH: delivery/migrations/0002_deliveryproof.py

Creates proof of delivery (needs orders).
"""

from __future__ import annotations

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import delivery.models.proof


class Migration(migrations.Migration):
    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("delivery", "0001_initial"),
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DeliveryProof",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "photo",
                    models.FileField(blank=True, null=True, upload_to=delivery.models.proof.proof_photo_path),
                ),
                ("signature_data", models.TextField(blank=True, default="")),
                ("recipient_name", models.CharField(blank=True, default="", max_length=255)),
                ("notes", models.TextField(blank=True, default="")),
                ("left_at_door", models.BooleanField(default=False)),
                ("captured_at", models.DateTimeField(auto_now=True)),
                (
                    "captured_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="delivery_proofs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="delivery_proof",
                        to="orders.order",
                    ),
                ),
            ],
        ),
    ]
