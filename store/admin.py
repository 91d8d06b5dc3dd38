# store/admin.py

from django.contrib import admin

from store.models import Setting, SettingHistory


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    list_display = ("key", "group", "type", "value", "is_public", "updated_at")
    list_filter = ("group", "type", "is_public")
    search_fields = ("key", "description")
    readonly_fields = ("updated_by", "updated_at")


@admin.register(SettingHistory)
class SettingHistoryAdmin(admin.ModelAdmin):
    list_display = ("setting", "old_value", "new_value", "changed_by", "changed_at")
    list_filter = ("setting__group",)
    readonly_fields = ("setting", "old_value", "new_value", "changed_by", "changed_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
