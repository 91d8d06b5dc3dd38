# notifications/services/notify.py

"""
NOTIFICATION FAN-OUT

notify()        -> one user
notify_staff()  -> every active staff/admin account
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model

from notifications.models import Notification
from permissions.roles import STAFF_ROLES

logger = logging.getLogger(__name__)


def notify(user, *, type: str, title: str, message: str = "", data: dict | None = None) -> Notification | None:
    if user is None:
        return None

    notification = Notification.objects.create(
        user=user,
        type=type,
        title=title,
        message=message,
        data=data or {},
    )
    logger.info(
        "Notification created",
        extra={"user_id": str(user.pk), "type": type, "notification_id": str(notification.id)},
    )
    return notification


def notify_staff(*, type: str, title: str, message: str = "", data: dict | None = None) -> int:
    User = get_user_model()
    recipients = list(User.objects.filter(role__in=STAFF_ROLES, is_active=True))

    Notification.objects.bulk_create(
        [
            Notification(user=u, type=type, title=title, message=message, data=data or {})
            for u in recipients
        ]
    )
    logger.info("Staff notified", extra={"type": type, "recipients": len(recipients)})
    return len(recipients)
