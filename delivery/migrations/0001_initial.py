"""
PATH: delivery/migrations/0001_initial.py

Creates delivery zones.
"""

from __future__ import annotations

import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DeliveryZone",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True, default="")),
                ("suburbs", models.JSONField(blank=True, default=list)),
                ("postcodes", models.JSONField(blank=True, default=list)),
                ("delivery_fee", models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                (
                    "free_delivery_threshold",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True),
                ),
                ("estimated_days", models.PositiveSmallIntegerField(default=1)),
                ("is_active", models.BooleanField(default=True)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["sort_order", "name"],
            },
        ),
    ]
