# reports/serializers/__init__.py

from rest_framework import serializers


class ReportQuerySerializer(serializers.Serializer):
    """Query params shared by every report; dates are parsed separately."""

    date_from = serializers.CharField(required=False, allow_blank=True)
    date_to = serializers.CharField(required=False, allow_blank=True)
    group_by = serializers.ChoiceField(choices=["day", "week", "month"], required=False, default="day")
