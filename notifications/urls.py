# notifications/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from notifications.views import NotificationViewSet

app_name = "notifications"

router = SimpleRouter()
router.register(r"notifications", NotificationViewSet, basename="notification")

urlpatterns = [
    path("", include(router.urls)),
]
