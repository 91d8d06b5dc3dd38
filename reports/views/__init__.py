from .reports import ReportExportView, ReportIndexView, ReportView

__all__ = [
    "ReportExportView",
    "ReportIndexView",
    "ReportView",
]
