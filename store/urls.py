# store/urls.py

from django.urls import path

from store.views import (
    PublicSettingsView,
    SettingsExportView,
    SettingsGroupView,
    SettingsHistoryView,
    SettingsImportView,
    SettingsIndexView,
)

app_name = "store"

urlpatterns = [
    path("settings/public/", PublicSettingsView.as_view(), name="public-settings"),
    path("admin/settings/", SettingsIndexView.as_view(), name="settings"),
    path("admin/settings/export/", SettingsExportView.as_view(), name="settings-export"),
    path("admin/settings/import/", SettingsImportView.as_view(), name="settings-import"),
    path("admin/settings/history/", SettingsHistoryView.as_view(), name="settings-history"),
    path("admin/settings/<slug:group>/", SettingsGroupView.as_view(), name="settings-group"),
]
