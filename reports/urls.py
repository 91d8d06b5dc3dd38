# reports/urls.py

from django.urls import path

from reports.services import REPORTS
from reports.views import ReportExportView, ReportIndexView, ReportView

app_name = "reports"

urlpatterns = [
    path("", ReportIndexView.as_view(), name="index"),
    *[path(f"{slug}/", ReportView.as_view(report_type=slug), name=slug) for slug in REPORTS],
    path("<slug:report_type>/export/", ReportExportView.as_view(), name="export"),
]
