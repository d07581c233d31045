"""
Shared building blocks for the organization-scoped REST views.

Every view that reads or writes tenant data derives from OrganizationScopedView
so that querysets are always narrowed to request.user.organization.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers, status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger(__name__)


class StandardResultsSetPagination(PageNumberPagination):
    """Standard pagination for list endpoints."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 200

    def get_paginated_response_data(self, data):
        """Return pagination metadata along with results."""
        return {
            'count': self.page.paginator.count,
            'total_pages': self.page.paginator.num_pages,
            'current_page': self.page.number,
            'page_size': self.get_page_size(self.request),
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'results': data,
        }


def success_response(data=None, message=None, status_code=status.HTTP_200_OK, **extra):
    payload = {'success': True}
    if data is not None:
        payload['data'] = data
    if message:
        payload['message'] = message
    payload.update(extra)
    return Response(payload, status=status_code)


def error_response(error, status_code=status.HTTP_400_BAD_REQUEST, fields=None):
    payload = {'success': False, 'error': error}
    if fields:
        payload['fields'] = fields
    return Response(payload, status=status_code)


class OrganizationScopedView(APIView):
    """
    Base class for tenant data views.

    Subclasses set ``model`` and ``serializer_class``; ``organization_lookup``
    is the ORM path from the model to its organization. List views that take
    query parameters also set a django-filter ``filterset_class``.
    """
    permission_classes = [IsAuthenticated]
    pagination_class = StandardResultsSetPagination
    model = None
    serializer_class = None
    filterset_class = None
    organization_lookup = 'organization'

    def get_organization(self):
        return self.request.user.organization

    def get_queryset(self):
        return self.model.objects.filter(
            **{self.organization_lookup: self.get_organization()}
        )

    def get_object(self, pk):
        """Objects of another organization are reported exactly like missing ones."""
        return self.get_queryset().filter(pk=pk).first()

    def get_serializer(self, *args, **kwargs):
        kwargs.setdefault('context', {'request': self.request})
        return self.serializer_class(*args, **kwargs)

    def get_filterset(self, queryset):
        return self.filterset_class(self.request.query_params, queryset=queryset, request=self.request)

    def paginated(self, queryset):
        paginator = self.pagination_class()
        page = paginator.paginate_queryset(queryset, self.request, view=self)
        serializer = self.get_serializer(page, many=True)
        return success_response(paginator.get_paginated_response_data(serializer.data))

    def not_found(self, label='Record'):
        return error_response(f'{label} not found', status.HTTP_404_NOT_FOUND)

    def validation_failed(self, errors):
        return error_response('Validation failed', status.HTTP_400_BAD_REQUEST, fields=errors)

    def conflict(self, message):
        return error_response(message, status.HTTP_409_CONFLICT)

    def invalid_filters(self, filterset):
        errors = filterset.errors.get_json_data()
        fields = {name: [error['message'] for error in messages] for name, messages in errors.items()}
        return error_response('Invalid filter parameters', status.HTTP_400_BAD_REQUEST, fields=fields)


def run_model_clean(model_class, attrs, instance=None):
    """
    Apply the model's clean() to the instance values merged with the incoming
    attrs, re-raising Django validation errors as serializer errors.
    """
    values = {}
    if instance is not None:
        for field in model_class._meta.concrete_fields:
            values[field.attname] = getattr(instance, field.attname)
    candidate = model_class(**values)
    for key, value in attrs.items():
        setattr(candidate, key, value)
    try:
        candidate.clean()
    except DjangoValidationError as exc:
        raise serializers.ValidationError(exc.message_dict)
    return candidate
