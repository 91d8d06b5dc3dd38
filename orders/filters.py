# orders/filters.py

"""
Order list filtering (django-filter).

Query params:
- status          one status or comma separated list
- date_from / date_to   created date (YYYY-MM-DD)
- scheduled_date  exact delivery date
- search          order number / customer email / customer name
- payment_status  latest payment status (pending|completed|failed|refunded)
- assigned_to_me  true|false (staff queue)
- delivery_method delivery|pickup
"""

import django_filters
from django.db.models import OuterRef, Q, Subquery

from backend.dates import day_bounds
from orders.models import Order
from payments.models import Payment

TRUTHY = {"1", "true", "yes", "on"}


class OrderFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(method="filter_status")
    date_from = django_filters.DateFilter(method="filter_date_from")
    date_to = django_filters.DateFilter(method="filter_date_to")
    scheduled_date = django_filters.DateFilter(field_name="scheduled_date")
    search = django_filters.CharFilter(method="filter_search")
    payment_status = django_filters.ChoiceFilter(choices=Payment.STATUS_CHOICES, method="filter_payment_status")
    assigned_to_me = django_filters.CharFilter(method="filter_assigned_to_me")
    delivery_method = django_filters.ChoiceFilter(choices=Order.METHOD_CHOICES)

    class Meta:
        model = Order
        fields = [
            "status",
            "date_from",
            "date_to",
            "scheduled_date",
            "search",
            "payment_status",
            "assigned_to_me",
            "delivery_method",
        ]

    def filter_status(self, queryset, name, value):
        statuses = [s.strip() for s in (value or "").split(",") if s.strip()]
        return queryset.filter(status__in=statuses) if statuses else queryset

    def filter_date_from(self, queryset, name, value):
        start, _ = day_bounds(value)
        return queryset.filter(created_at__gte=start)

    def filter_date_to(self, queryset, name, value):
        _, end = day_bounds(value)
        return queryset.filter(created_at__lt=end)

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(order_number__icontains=value)
            | Q(user__email__icontains=value)
            | Q(user__first_name__icontains=value)
            | Q(user__last_name__icontains=value)
        )

    def filter_payment_status(self, queryset, name, value):
        latest = Payment.objects.filter(order=OuterRef("pk")).order_by("-created_at").values("status")[:1]
        return queryset.annotate(latest_payment_status=Subquery(latest)).filter(latest_payment_status=value)

    def filter_assigned_to_me(self, queryset, name, value):
        if (value or "").strip().lower() in TRUTHY and self.request is not None:
            return queryset.filter(assigned_to=self.request.user)
        return queryset
