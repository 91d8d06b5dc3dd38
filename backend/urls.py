# backend/urls.py
"""
PROJECT URLS

All API routes live under /api/v1/.

- Storefront (AllowAny): products, categories, delivery zones, public settings
- Customer (JWT): cart, wishlist, checkout, payments, own orders, support tickets
- Staff / admin (JWT + capability): /staff/..., /admin/...
- Webhooks: /payments/webhooks/... (signature-verified, no JWT)

Django admin path is configurable via ADMIN_PATH.
"""

from __future__ import annotations

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from backend.health import health_check, health_detailed, health_live, health_ready

API_PREFIX = "/api/v1"


# ------------------ API ROOT (PUBLIC) ------------------
@extend_schema(tags=["Health"], responses={200: dict})
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response(
        {
            "message": "Zambezi Meats API is running",
            "version": settings.API_VERSION,
            "auth": {
                "register": f"{API_PREFIX}/auth/register/",
                "login": f"{API_PREFIX}/auth/login/",
                "refresh": f"{API_PREFIX}/auth/refresh/",
                "user": f"{API_PREFIX}/auth/user/",
            },
            "docs": {
                "swagger": f"{API_PREFIX}/docs/",
                "schema": f"{API_PREFIX}/schema/",
            },
            "modules": {
                "products": f"{API_PREFIX}/products/",
                "categories": f"{API_PREFIX}/categories/",
                "delivery_zones": f"{API_PREFIX}/delivery-zones/",
                "cart": f"{API_PREFIX}/cart/",
                "checkout": f"{API_PREFIX}/checkout/",
                "payments": f"{API_PREFIX}/payments/",
                "customer": f"{API_PREFIX}/customer/",
                "staff": f"{API_PREFIX}/staff/",
                "admin": f"{API_PREFIX}/admin/",
                "reports": f"{API_PREFIX}/admin/reports/",
                "inventory": f"{API_PREFIX}/admin/inventory/",
                "support": f"{API_PREFIX}/customer/tickets/",
            },
        }
    )


# ------------------ ADMIN PATH (HARDENED) ------------------
ADMIN_PATH = getattr(settings, "ADMIN_PATH", "admin/")
if not ADMIN_PATH.endswith("/"):
    ADMIN_PATH = f"{ADMIN_PATH}/"


# ------------------ API ROUTES (ALL UNDER /api/v1/) ------------------
api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    path("health/detailed/", health_detailed, name="health-detailed"),
    path("health/ready/", health_ready, name="health-ready"),
    path("health/live/", health_live, name="health-live"),
    # OpenAPI / Swagger
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    # Apps; each urls.py carries its own sub-prefixes
    path("", include("users.urls")),
    path("", include("products.urls")),
    path("", include("store.urls")),
    path("", include("delivery.urls")),
    path("", include("cart.urls")),
    path("", include("checkout.urls")),
    path("", include("orders.urls")),
    path("", include("notifications.urls")),
    path("", include("support.urls")),
    path("payments/", include("payments.urls")),
    path("admin/inventory/", include("inventory.urls")),
    path("admin/reports/", include("reports.urls")),
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url=f"{API_PREFIX}/docs/", permanent=False), name="root"),
    path("api/v1/", include(api_urlpatterns)),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
