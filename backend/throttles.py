# backend/throttles.py

"""
Scoped throttles. Rates live in REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"].
"""

from rest_framework.throttling import AnonRateThrottle, SimpleRateThrottle


class AuthThrottle(AnonRateThrottle):
    scope = "auth"


class PublicCatalogThrottle(AnonRateThrottle):
    scope = "public_catalog"


class WebhookThrottle(SimpleRateThrottle):
    """Per source IP; providers retry from a handful of addresses."""

    scope = "webhook"

    def get_cache_key(self, request, view):
        return self.cache_format % {
            "scope": self.scope,
            "ident": self.get_ident(request),
        }
