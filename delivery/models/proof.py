# delivery/models/proof.py

import uuid

from django.conf import settings
from django.db import models


def proof_photo_path(instance, filename):
    return f"delivery-proofs/{instance.order_id}/{filename}"


class DeliveryProof(models.Model):
    """
    Proof of delivery captured by the driver at the door.
    One per order; re-capturing replaces the previous values.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.OneToOneField("orders.Order", on_delete=models.CASCADE, related_name="delivery_proof")

    photo = models.FileField(upload_to=proof_photo_path, null=True, blank=True)
    signature_data = models.TextField(blank=True, default="")
    recipient_name = models.CharField(max_length=255, blank=True, default="")
    notes = models.TextField(blank=True, default="")
    left_at_door = models.BooleanField(default=False)

    captured_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="delivery_proofs",
    )
    captured_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"POD {self.order_id}"
