# backend/pagination.py

from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    """
    Page-number pagination rendered in the list envelope:

        {"success": true, "data": [...],
         "meta": {"current_page", "last_page", "per_page", "total"}}
    """

    page_size = 20
    page_size_query_param = "per_page"
    max_page_size = 100

    def get_paginated_response(self, data, **extra):
        body = {
            "success": True,
            "data": data,
            "meta": {
                "current_page": self.page.number,
                "last_page": self.page.paginator.num_pages,
                "per_page": self.get_page_size(self.request),
                "total": self.page.paginator.count,
            },
        }
        body.update(extra)
        return Response(body)

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "data": schema,
                "meta": {
                    "type": "object",
                    "properties": {
                        "current_page": {"type": "integer"},
                        "last_page": {"type": "integer"},
                        "per_page": {"type": "integer"},
                        "total": {"type": "integer"},
                    },
                },
            },
        }


def paginate(view, queryset, serializer_class, **extra):
    """
    Paginate inside a plain APIView using the configured paginator.
    """
    paginator = StandardPagination()
    page = paginator.paginate_queryset(queryset, view.request, view=view)
    data = serializer_class(page, many=True, context={"request": view.request}).data
    return paginator.get_paginated_response(data, **extra)
