# delivery/services/proof.py

"""
PROOF OF DELIVERY

capture_proof():
- order must be out_for_delivery
- a photo or a signature is required
- creates or replaces the order's DeliveryProof, then marks the order
  delivered (which also collects a pending COD payment)
"""

from __future__ import annotations

import logging

from django.db import transaction

from delivery.models import DeliveryProof
from orders.models import Order

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    code = "DELIVERY_ERROR"


class NotOutForDeliveryError(DeliveryError):
    code = "NOT_OUT_FOR_DELIVERY"


class ProofRequiredError(DeliveryError):
    code = "PROOF_REQUIRED"


@transaction.atomic
def capture_proof(
    order: Order,
    *,
    user,
    photo=None,
    signature_data: str = "",
    recipient_name: str = "",
    notes: str = "",
    left_at_door: bool = False,
) -> DeliveryProof:
    from orders.services import transition

    locked = Order.objects.select_for_update().get(pk=order.pk)
    if locked.status != Order.STATUS_OUT_FOR_DELIVERY:
        raise NotOutForDeliveryError("Only orders out for delivery can be marked delivered.")
    if photo is None and not signature_data:
        raise ProofRequiredError("A photo or signature is required.")

    proof, _ = DeliveryProof.objects.get_or_create(order=locked)
    if photo is not None:
        proof.photo = photo
    proof.signature_data = signature_data or proof.signature_data
    proof.recipient_name = recipient_name
    proof.notes = notes
    proof.left_at_door = left_at_door
    proof.captured_by = user
    proof.save()

    note = f"Delivered to {recipient_name}" if recipient_name else "Delivered"
    if left_at_door:
        note += " (left at door)"
    transition(locked, Order.STATUS_DELIVERED, user=user, notes=note)

    logger.info(
        "Proof of delivery captured",
        extra={"order_id": str(locked.pk), "has_photo": bool(proof.photo), "left_at_door": left_at_door},
    )
    return proof
