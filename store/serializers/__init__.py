# store/serializers/__init__.py

from rest_framework import serializers

from store.models import SettingHistory


class SettingsUpdateSerializer(serializers.Serializer):
    """
    PUT body for a settings group: {"settings": {key: value, ...}}.
    Per-key validation happens in the settings service.
    """

    settings = serializers.DictField(allow_empty=False)


class SettingHistorySerializer(serializers.ModelSerializer):
    key = serializers.CharField(source="setting.key", read_only=True)
    group = serializers.CharField(source="setting.group", read_only=True)
    changed_by_email = serializers.EmailField(source="changed_by.email", read_only=True, default=None)

    class Meta:
        model = SettingHistory
        fields = [
            "id",
            "key",
            "group",
            "old_value",
            "new_value",
            "changed_by_email",
            "changed_at",
        ]
        read_only_fields = fields
