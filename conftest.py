"""
pytest harness plumbing.

backend.settings.base switches to test mode when "test" is in sys.argv
(as under `manage.py test`). pytest-django loads settings before this file,
so apply the same test-mode overrides here.
"""

from django.conf import settings


def pytest_configure(config):
    settings.TESTING = True
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = ()
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
        scope: "10000/min" for scope in settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]
    }
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

    from rest_framework.settings import api_settings

    api_settings.reload()
