# store/views/settings.py

"""
SITE SETTINGS

GET  /settings/public/            AllowAny
GET  /admin/settings/             all groups
GET  /admin/settings/{group}/     one group with type metadata
PUT  /admin/settings/{group}/     {"settings": {...}}
GET  /admin/settings/export/
POST /admin/settings/import/      {"settings": {...}}
GET  /admin/settings/history/     ?key=

Admin routes require settings.manage.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from backend.pagination import paginate
from backend.responses import error_response, success_response
from backend.throttles import PublicCatalogThrottle
from permissions.roles import CAP_SETTINGS_MANAGE, HasCapability
from store.models import SettingHistory
from store.serializers import SettingHistorySerializer, SettingsUpdateSerializer
from store.services import settings as site_settings


def _validation_failed(exc: site_settings.SettingsValidationError):
    return error_response(
        code=exc.code,
        message="Some settings are invalid.",
        http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        errors=exc.errors,
    )


def _unknown_group(exc: site_settings.UnknownSettingsGroupError):
    return error_response(code="NOT_FOUND", message=str(exc), http_status=status.HTTP_404_NOT_FOUND)


class PublicSettingsView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicCatalogThrottle]

    @extend_schema(tags=["Settings"], responses={200: dict})
    def get(self, request):
        return success_response(site_settings.public_settings())


class _SettingsAdminView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_SETTINGS_MANAGE


class SettingsIndexView(_SettingsAdminView):
    @extend_schema(tags=["Admin Settings"], responses={200: dict})
    def get(self, request):
        return success_response(site_settings.all_settings(), groups=site_settings.GROUPS)


class SettingsGroupView(_SettingsAdminView):
    @extend_schema(tags=["Admin Settings"], responses={200: dict})
    def get(self, request, group):
        try:
            return success_response(site_settings.describe_group(group))
        except site_settings.UnknownSettingsGroupError as exc:
            return _unknown_group(exc)

    @extend_schema(tags=["Admin Settings"], request=SettingsUpdateSerializer, responses={200: dict})
    def put(self, request, group):
        serializer = SettingsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            changed = site_settings.update_group(
                group, serializer.validated_data["settings"], user=request.user
            )
        except site_settings.UnknownSettingsGroupError as exc:
            return _unknown_group(exc)
        except site_settings.SettingsValidationError as exc:
            return _validation_failed(exc)

        return success_response(
            site_settings.get_group(group),
            message="Settings updated successfully.",
            changed=changed,
        )


class SettingsExportView(_SettingsAdminView):
    @extend_schema(tags=["Admin Settings"], responses={200: dict})
    def get(self, request):
        return success_response(site_settings.export_settings())


class SettingsImportView(_SettingsAdminView):
    @extend_schema(tags=["Admin Settings"], request=SettingsUpdateSerializer, responses={200: dict})
    def post(self, request):
        serializer = SettingsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            changed = site_settings.import_settings(
                serializer.validated_data["settings"], user=request.user
            )
        except site_settings.SettingsValidationError as exc:
            return _validation_failed(exc)

        return success_response(
            {"changed": changed},
            message=f"Imported {len(changed)} setting(s).",
        )


class SettingsHistoryView(_SettingsAdminView):
    @extend_schema(tags=["Admin Settings"], responses={200: SettingHistorySerializer(many=True)})
    def get(self, request):
        qs = SettingHistory.objects.select_related("setting", "changed_by")
        key = (request.query_params.get("key") or "").strip()
        if key:
            qs = qs.filter(setting__key=key)
        return paginate(self, qs, SettingHistorySerializer)
