# backend/viewsets.py

"""
ENVELOPED VIEWSETS

ModelViewSet that renders every action through backend.responses:
- list      -> paginated envelope (StandardPagination)
- retrieve  -> {"success": true, "data": {...}}
- create    -> 201 {"success": true, "message": ..., "data": {...}}
- update    -> {"success": true, "message": ..., "data": {...}}
- destroy   -> {"success": true, "message": ...}
"""

from __future__ import annotations

from rest_framework import status, viewsets

from backend.responses import success_response


class EnvelopeModelViewSet(viewsets.ModelViewSet):
    resource_name = "Resource"

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        serializer = self.get_serializer(queryset, many=True)
        return success_response(serializer.data)

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return success_response(serializer.data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return success_response(
            self.get_serializer(serializer.instance).data,
            message=f"{self.resource_name} created successfully.",
            http_status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return success_response(
            self.get_serializer(serializer.instance).data,
            message=f"{self.resource_name} updated successfully.",
        )

    def destroy(self, request, *args, **kwargs):
        self.perform_destroy(self.get_object())
        return success_response(message=f"{self.resource_name} deleted successfully.")


class EnvelopeReadOnlyModelViewSet(viewsets.ReadOnlyModelViewSet):
    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        serializer = self.get_serializer(queryset, many=True)
        return success_response(serializer.data)

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return success_response(serializer.data)
