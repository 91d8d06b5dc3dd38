# backend/dates.py

"""
Report date handling shared by reports, inventory and delivery dashboards.

Dates are YYYY-MM-DD in the store timezone; ranges are inclusive of both days.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from django.utils import timezone
from rest_framework.exceptions import ValidationError


def parse_report_date(date_str: str | None, *, field: str = "date") -> date | None:
    """
    Accepts YYYY-MM-DD. Blank -> None. Malformed -> 422.
    """
    if not date_str:
        return None

    try:
        return datetime.strptime(date_str.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError({field: ["Use the YYYY-MM-DD format."]})


def day_bounds(d: date):
    """
    Returns timezone-aware datetime bounds [start, end) for a local date.
    """
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(d, time.min), tz)
    end = start + timedelta(days=1)
    return start, end


def date_range_from_request(request, *, default_days: int = 30) -> tuple[date, date]:
    """
    date_from / date_to query params; defaults to the last `default_days` days.
    """
    params = request.query_params
    today = timezone.localdate()

    date_to = parse_report_date(params.get("date_to"), field="date_to") or today
    date_from = parse_report_date(params.get("date_from"), field="date_from") or (
        date_to - timedelta(days=default_days - 1)
    )

    if date_from > date_to:
        raise ValidationError({"date_from": ["date_from must be on or before date_to."]})

    return date_from, date_to


def range_bounds(date_from: date, date_to: date):
    """[start of date_from, start of day after date_to)"""
    start, _ = day_bounds(date_from)
    _, end = day_bounds(date_to)
    return start, end
