# users/models/address.py

import uuid

from django.conf import settings
from django.db import models, transaction


class Address(models.Model):
    """
    Customer delivery address.

    Rules:
    - At most one default address per user (enforced on save).
    - A user's first address becomes the default.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="addresses",
    )

    label = models.CharField(max_length=50, blank=True, default="Home")
    street = models.CharField(max_length=255)
    suburb = models.CharField(max_length=100)
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=50)
    postcode = models.CharField(max_length=10)
    country = models.CharField(max_length=100, default="Australia")

    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-is_default", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=models.Q(is_default=True),
                name="one_default_address_per_user",
            )
        ]

    @property
    def full_address(self) -> str:
        parts = [self.street, self.suburb, self.city, f"{self.state} {self.postcode}".strip(), self.country]
        return ", ".join(p for p in parts if p)

    def save(self, *args, **kwargs):
        with transaction.atomic():
            siblings = Address.objects.filter(user_id=self.user_id).exclude(pk=self.pk)
            if not siblings.exists():
                self.is_default = True
            if self.is_default:
                siblings.filter(is_default=True).update(is_default=False)
            super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.label}: {self.full_address}"
