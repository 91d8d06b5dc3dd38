# reports/views/reports.py

"""
ADMIN REPORTS (mounted at /api/v1/admin/reports/, reports.view)

GET /                        available report types
GET /{type}/                 JSON report for date_from..date_to
GET /{type}/export/          same report as CSV

date_from / date_to are YYYY-MM-DD (default: the last 30 days).
revenue/ also takes group_by=day|week|month.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.dates import date_range_from_request
from backend.exports import csv_response
from backend.responses import error_response, success_response
from permissions.roles import CAP_REPORTS_VIEW, HasCapability
from reports.serializers import ReportQuerySerializer
from reports.services import EXPORTS, REPORTS, ReportRange, build_report, export_rows

logger = logging.getLogger(__name__)

REPORT_PARAMETERS = [
    OpenApiParameter("date_from", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("date_to", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("group_by", str, OpenApiParameter.QUERY, required=False, enum=["day", "week", "month"]),
]


class _ReportBaseView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    def report_options(self, request) -> tuple[ReportRange, dict]:
        query = ReportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        date_from, date_to = date_range_from_request(request)
        return ReportRange(date_from, date_to), {"group_by": query.validated_data["group_by"]}


class ReportIndexView(_ReportBaseView):
    @extend_schema(tags=["Reports"], responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return success_response(
            [{"type": slug, "exportable": slug in EXPORTS} for slug in REPORTS],
        )


class ReportView(_ReportBaseView):
    report_type: str | None = None

    @extend_schema(tags=["Reports"], parameters=REPORT_PARAMETERS, responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        rng, options = self.report_options(request)
        return success_response(build_report(self.report_type, rng, **options))


class ReportExportView(_ReportBaseView):
    @extend_schema(tags=["Reports"], parameters=REPORT_PARAMETERS, responses={(200, "text/csv"): str})
    def get(self, request, report_type):
        if report_type not in EXPORTS:
            return error_response(
                code="NOT_FOUND",
                message=f"Unknown report type '{report_type}'.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        rng, options = self.report_options(request)
        header, rows = export_rows(report_type, rng, **options)
        logger.info(
            "Report exported",
            extra={
                "report_type": report_type,
                "date_from": rng.date_from.isoformat(),
                "date_to": rng.date_to.isoformat(),
                "rows": len(rows),
                "user_id": str(request.user.pk),
            },
        )
        return csv_response(f"{report_type}-report", header, rows)
