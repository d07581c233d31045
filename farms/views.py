"""
Farm and shed management views.

Endpoints:
- GET/POST /api/farms/
- GET/PUT/DELETE /api/farms/{id}/
- GET/POST /api/sheds/
- GET/PUT/DELETE /api/sheds/{id}/
"""

import logging

from rest_framework import status

from accounts.permissions import IsOwnerOrManagerForWrites
from core.api import OrganizationScopedView, success_response
from .filters import FarmFilter, ShedFilter
from .models import Farm, Shed
from .serializers import FarmSerializer, ShedSerializer

logger = logging.getLogger(__name__)


class FarmListView(OrganizationScopedView):
    """
    GET /api/farms/
    POST /api/farms/

    Query Parameters:
        is_active (bool): filter by status; all farms when omitted
        manager (uuid): farms managed by this user
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = Farm
    serializer_class = FarmSerializer
    filterset_class = FarmFilter

    def get(self, request):
        filterset = self.get_filterset(self.get_queryset().select_related('manager'))
        if not filterset.is_valid():
            return self.invalid_filters(filterset)
        return self.paginated(filterset.qs.order_by('name'))

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        farm = serializer.save(organization=self.get_organization())
        logger.info(f"Farm {farm.id} created by {request.user.email}")
        return success_response(serializer.data, status_code=status.HTTP_201_CREATED)


class FarmDetailView(OrganizationScopedView):
    """
    GET /api/farms/{id}/
    PUT /api/farms/{id}/
    DELETE /api/farms/{id}/ - blocked with 409 once production has been recorded
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = Farm
    serializer_class = FarmSerializer

    def get(self, request, farm_id):
        farm = self.get_object(farm_id)
        if farm is None:
            return self.not_found('Farm')
        return success_response(self.get_serializer(farm).data)

    def put(self, request, farm_id):
        farm = self.get_object(farm_id)
        if farm is None:
            return self.not_found('Farm')
        serializer = self.get_serializer(farm, data=request.data, partial=True)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        serializer.save()
        return success_response(serializer.data, message='Farm updated')

    def delete(self, request, farm_id):
        farm = self.get_object(farm_id)
        if farm is None:
            return self.not_found('Farm')
        if farm.has_production_records():
            return self.conflict(
                'Cannot delete a farm with production records. Deactivate it instead.'
            )
        farm.delete()
        logger.info(f"Farm {farm_id} deleted by {request.user.email}")
        return success_response(message='Farm deleted')


class ShedListView(OrganizationScopedView):
    """
    GET /api/sheds/
    POST /api/sheds/

    Query Parameters:
        farm (uuid): sheds of one farm
        is_active (bool)
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = Shed
    serializer_class = ShedSerializer
    filterset_class = ShedFilter
    organization_lookup = 'farm__organization'

    def get(self, request):
        filterset = self.get_filterset(self.get_queryset().select_related('farm'))
        if not filterset.is_valid():
            return self.invalid_filters(filterset)
        return self.paginated(filterset.qs)

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        serializer.save()
        return success_response(serializer.data, status_code=status.HTTP_201_CREATED)


class ShedDetailView(OrganizationScopedView):
    """
    GET /api/sheds/{id}/
    PUT /api/sheds/{id}/
    DELETE /api/sheds/{id}/ - blocked with 409 once production has been recorded
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = Shed
    serializer_class = ShedSerializer
    organization_lookup = 'farm__organization'

    def get(self, request, shed_id):
        shed = self.get_object(shed_id)
        if shed is None:
            return self.not_found('Shed')
        return success_response(self.get_serializer(shed).data)

    def put(self, request, shed_id):
        shed = self.get_object(shed_id)
        if shed is None:
            return self.not_found('Shed')
        serializer = self.get_serializer(shed, data=request.data, partial=True)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        serializer.save()
        return success_response(serializer.data, message='Shed updated')

    def delete(self, request, shed_id):
        shed = self.get_object(shed_id)
        if shed is None:
            return self.not_found('Shed')
        if shed.has_production_records():
            return self.conflict(
                'Cannot delete a shed with production records. Deactivate it instead.'
            )
        shed.delete()
        return success_response(message='Shed deleted')
