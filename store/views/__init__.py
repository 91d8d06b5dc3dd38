from .settings import (
    PublicSettingsView,
    SettingsExportView,
    SettingsGroupView,
    SettingsHistoryView,
    SettingsImportView,
    SettingsIndexView,
)

__all__ = [
    "PublicSettingsView",
    "SettingsExportView",
    "SettingsGroupView",
    "SettingsHistoryView",
    "SettingsImportView",
    "SettingsIndexView",
]
