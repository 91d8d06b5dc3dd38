# backend/health.py

"""
PATH: backend/health.py

HEALTH ENDPOINTS (PUBLIC)

- /health/           app responding + DB SELECT 1
- /health/detailed/  db + cache + version + server time
- /health/ready/     readiness probe: 503 until the DB answers
- /health/live/      liveness probe: process is up
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.cache import cache
from django.db import connections
from django.db.utils import OperationalError
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)


def _check_db() -> tuple[bool, str | None]:
    try:
        conn = connections["default"]
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
        return True, None
    except OperationalError as e:
        logger.warning("Health check: database unavailable", extra={"error": str(e)})
        return False, str(e)


def _check_cache() -> bool:
    key = "health:ping"
    cache.set(key, "pong", 5)
    return cache.get(key) == "pong"


@extend_schema(responses={200: dict, 503: dict}, tags=["Health"])
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    db_ok, error = _check_db()
    if not db_ok:
        return Response({"status": "degraded", "db": "down", "error": error}, status=503)
    return Response({"status": "ok", "db": "ok"})


@extend_schema(responses={200: dict, 503: dict}, tags=["Health"])
@api_view(["GET"])
@permission_classes([AllowAny])
def health_detailed(request):
    db_ok, error = _check_db()
    cache_ok = _check_cache()
    body = {
        "status": "ok" if (db_ok and cache_ok) else "degraded",
        "checks": {
            "db": "ok" if db_ok else "down",
            "cache": "ok" if cache_ok else "down",
        },
        "version": getattr(settings, "API_VERSION", ""),
        "timestamp": timezone.now().isoformat(),
    }
    if error:
        body["error"] = error
    return Response(body, status=200 if body["status"] == "ok" else 503)


@extend_schema(responses={200: dict, 503: dict}, tags=["Health"])
@api_view(["GET"])
@permission_classes([AllowAny])
def health_ready(request):
    db_ok, _ = _check_db()
    if not db_ok:
        return Response({"ready": False}, status=503)
    return Response({"ready": True})


@extend_schema(responses={200: dict}, tags=["Health"])
@api_view(["GET"])
@permission_classes([AllowAny])
def health_live(request):
    return Response({"alive": True})
