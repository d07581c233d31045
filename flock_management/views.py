"""
Flock Management API Views

Endpoints:
- GET/POST /api/production/ - daily egg production
- GET/PUT/DELETE /api/production/{id}/
- GET/POST /api/mortality/
- GET/POST /api/flock/ - bird count snapshots
- GET/POST /api/dispatch/ - eggs leaving the farm
- GET/POST /api/production-cycles/
- GET/PUT/DELETE /api/production-cycles/{id}/
- POST /api/production-cycles/{id}/activate/
"""

import logging

from django.db import IntegrityError, transaction
from rest_framework import status

from accounts.permissions import IsOrganizationMember, IsOwnerOrManagerForWrites
from core.api import OrganizationScopedView, success_response, error_response
from .filters import (
    DailyProductionFilter,
    MortalityRecordFilter,
    FlockRecordFilter,
    ProductionCycleFilter,
    DispatchRecordFilter,
)
from .models import DailyProduction, MortalityRecord, FlockRecord, ProductionCycle, DispatchRecord
from .serializers import (
    DailyProductionSerializer,
    MortalityRecordSerializer,
    FlockRecordSerializer,
    ProductionCycleSerializer,
    DispatchRecordSerializer,
)

logger = logging.getLogger(__name__)

DUPLICATE_PRODUCTION = 'A production record for this farm, shed and date already exists'


class ProductionListView(OrganizationScopedView):
    """
    GET /api/production/
    POST /api/production/

    Query Parameters:
        farm (uuid), shed (uuid), start_date (YYYY-MM-DD), end_date (YYYY-MM-DD)
    """
    permission_classes = [IsOrganizationMember]
    model = DailyProduction
    serializer_class = DailyProductionSerializer
    filterset_class = DailyProductionFilter
    organization_lookup = 'farm__organization'

    def get(self, request):
        filterset = self.get_filterset(self.get_queryset().select_related('farm', 'shed', 'recorded_by'))
        if not filterset.is_valid():
            return self.invalid_filters(filterset)
        return self.paginated(filterset.qs.order_by('-date', 'farm__name'))

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)

        data = serializer.validated_data
        candidate = DailyProduction(farm=data['farm'], shed=data.get('shed'), date=data['date'])
        if candidate.duplicate_exists():
            return self.conflict(DUPLICATE_PRODUCTION)

        try:
            with transaction.atomic():
                record = serializer.save(recorded_by=request.user)
        except IntegrityError:
            return self.conflict(DUPLICATE_PRODUCTION)

        logger.info(f"Production record {record.id} saved for farm {record.farm_id} on {record.date}")
        return success_response(
            self.get_serializer(record).data,
            message='Production record saved',
            status_code=status.HTTP_201_CREATED,
        )


class ProductionDetailView(OrganizationScopedView):
    """
    GET /api/production/{id}/
    PUT /api/production/{id}/
    DELETE /api/production/{id}/
    """
    permission_classes = [IsOrganizationMember]
    model = DailyProduction
    serializer_class = DailyProductionSerializer
    organization_lookup = 'farm__organization'

    def get(self, request, record_id):
        record = self.get_object(record_id)
        if record is None:
            return self.not_found('Production record')
        return success_response(self.get_serializer(record).data)

    def put(self, request, record_id):
        record = self.get_object(record_id)
        if record is None:
            return self.not_found('Production record')
        serializer = self.get_serializer(record, data=request.data, partial=True)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)

        data = serializer.validated_data
        candidate = DailyProduction(
            pk=record.pk,
            farm=data.get('farm', record.farm),
            shed=data.get('shed', record.shed),
            date=data.get('date', record.date),
        )
        if candidate.duplicate_exists():
            return self.conflict(DUPLICATE_PRODUCTION)

        try:
            with transaction.atomic():
                serializer.save()
        except IntegrityError:
            return self.conflict(DUPLICATE_PRODUCTION)
        return success_response(serializer.data, message='Production record updated')

    def delete(self, request, record_id):
        if request.user.role == 'WORKER':
            return error_response('Only owners and managers can delete production records', status.HTTP_403_FORBIDDEN)
        record = self.get_object(record_id)
        if record is None:
            return self.not_found('Production record')
        record.delete()
        return success_response(message='Production record deleted')


class MortalityListView(OrganizationScopedView):
    """
    GET /api/mortality/
    POST /api/mortality/

    Recording mortality reduces the farm's stored bird counts in the same
    transaction.
    """
    permission_classes = [IsOrganizationMember]
    model = MortalityRecord
    serializer_class = MortalityRecordSerializer
    filterset_class = MortalityRecordFilter
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
        with transaction.atomic():
            record = serializer.save(recorded_by=request.user)
        return success_response(
            self.get_serializer(record).data,
            message='Mortality recorded',
            status_code=status.HTTP_201_CREATED,
        )


class FlockRecordListView(OrganizationScopedView):
    """
    GET /api/flock/
    POST /api/flock/
    """
    permission_classes = [IsOrganizationMember]
    model = FlockRecord
    serializer_class = FlockRecordSerializer
    filterset_class = FlockRecordFilter
    organization_lookup = 'farm__organization'

    def get(self, request):
        filterset = self.get_filterset(self.get_queryset().select_related('farm', 'shed'))
        if not filterset.is_valid():
            return self.invalid_filters(filterset)
        return self.paginated(filterset.qs)

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        data = serializer.validated_data
        if FlockRecord.objects.filter(farm=data['farm'], shed=data.get('shed'), date=data['date']).exists():
            return self.conflict('A flock record for this farm, shed and date already exists')
        try:
            with transaction.atomic():
                record = serializer.save(recorded_by=request.user)
        except IntegrityError:
            return self.conflict('A flock record for this farm, shed and date already exists')
        return success_response(self.get_serializer(record).data, status_code=status.HTTP_201_CREATED)


class DispatchListView(OrganizationScopedView):
    """
    GET /api/dispatch/
    POST /api/dispatch/

    Query Parameters:
        farm (uuid), start_date (YYYY-MM-DD), end_date (YYYY-MM-DD)
    """
    permission_classes = [IsOrganizationMember]
    model = DispatchRecord
    serializer_class = DispatchRecordSerializer
    filterset_class = DispatchRecordFilter
    organization_lookup = 'farm__organization'

    def get(self, request):
        filterset = self.get_filterset(self.get_queryset().select_related('farm'))
        if not filterset.is_valid():
            return self.invalid_filters(filterset)
        return self.paginated(filterset.qs.order_by('-date', '-created_at'))

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        record = serializer.save(recorded_by=request.user)
        logger.info(
            f"Dispatch {record.id}: {record.total_dispatched} eggs from farm {record.farm_id} on {record.date}"
        )
        return success_response(
            self.get_serializer(record).data,
            message='Dispatch record created successfully',
            status_code=status.HTTP_201_CREATED,
        )


class ProductionCycleListView(OrganizationScopedView):
    """
    GET /api/production-cycles/
    POST /api/production-cycles/ - the new cycle becomes the farm's only active one

    Query Parameters:
        farm (uuid), is_active (bool)
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = ProductionCycle
    serializer_class = ProductionCycleSerializer
    filterset_class = ProductionCycleFilter

    def get(self, request):
        filterset = self.get_filterset(self.get_queryset().select_related('farm'))
        if not filterset.is_valid():
            return self.invalid_filters(filterset)
        return self.paginated(filterset.qs)

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        cycle = serializer.save(organization=self.get_organization())
        logger.info(f"Production cycle {cycle.id} created for farm {cycle.farm_id}")
        return success_response(self.get_serializer(cycle).data, status_code=status.HTTP_201_CREATED)


class ProductionCycleDetailView(OrganizationScopedView):
    """
    GET /api/production-cycles/{id}/
    PUT /api/production-cycles/{id}/
    DELETE /api/production-cycles/{id}/
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = ProductionCycle
    serializer_class = ProductionCycleSerializer

    def get(self, request, cycle_id):
        cycle = self.get_object(cycle_id)
        if cycle is None:
            return self.not_found('Production cycle')
        return success_response(self.get_serializer(cycle).data)

    def put(self, request, cycle_id):
        cycle = self.get_object(cycle_id)
        if cycle is None:
            return self.not_found('Production cycle')
        serializer = self.get_serializer(cycle, data=request.data, partial=True)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        serializer.save()
        return success_response(serializer.data, message='Production cycle updated')

    def delete(self, request, cycle_id):
        cycle = self.get_object(cycle_id)
        if cycle is None:
            return self.not_found('Production cycle')
        cycle.delete()
        return success_response(message='Production cycle deleted')


class ProductionCycleActivateView(OrganizationScopedView):
    """
    POST /api/production-cycles/{id}/activate/

    Makes the cycle the farm's active one; any other active cycle of the farm
    is deactivated in the same transaction.
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = ProductionCycle
    serializer_class = ProductionCycleSerializer

    def post(self, request, cycle_id):
        cycle = self.get_object(cycle_id)
        if cycle is None:
            return self.not_found('Production cycle')
        cycle.activate()
        return success_response(self.get_serializer(cycle).data, message='Production cycle activated')
