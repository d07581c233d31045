"""
Attendance API Views

Endpoints:
- GET /api/attendance/ - filter by date, start_date, end_date, user, status
- POST /api/attendance/ - single record or a whole day ``{date, records: [...]}``
- GET/PUT/DELETE /api/attendance/{id}/
"""

import logging

from django.db import IntegrityError, transaction
from rest_framework import status

from accounts.permissions import IsOwnerOrManagerForWrites
from core.api import OrganizationScopedView, success_response
from .filters import AttendanceRecordFilter
from .models import AttendanceRecord
from .serializers import AttendanceRecordSerializer, BulkAttendanceSerializer

logger = logging.getLogger(__name__)

ALREADY_RECORDED = 'Attendance already recorded for this user and date'


class AttendanceListView(OrganizationScopedView):
    """
    GET /api/attendance/
    POST /api/attendance/

    A bulk POST is all-or-nothing: if any user already has a record for the
    date nothing is written and 409 is returned.
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = AttendanceRecord
    serializer_class = AttendanceRecordSerializer
    filterset_class = AttendanceRecordFilter
    organization_lookup = 'user__organization'

    def get(self, request):
        filterset = self.get_filterset(self.get_queryset().select_related('user'))
        if not filterset.is_valid():
            return self.invalid_filters(filterset)
        return self.paginated(filterset.qs)

    def post(self, request):
        if 'records' in request.data:
            return self._create_bulk(request)

        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        data = serializer.validated_data
        if AttendanceRecord.objects.filter(user=data['user'], date=data['date']).exists():
            return self.conflict(ALREADY_RECORDED)
        try:
            with transaction.atomic():
                record = serializer.save(recorded_by=request.user)
        except IntegrityError:
            return self.conflict(ALREADY_RECORDED)
        return success_response(self.get_serializer(record).data, status_code=status.HTTP_201_CREATED)

    def _create_bulk(self, request):
        serializer = BulkAttendanceSerializer(data=request.data, context={'request': request})
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)

        day = serializer.validated_data['date']
        entries = serializer.validated_data['records']
        existing = AttendanceRecord.objects.filter(
            date=day, user__in=[entry['user'] for entry in entries]
        ).select_related('user')
        if existing.exists():
            names = ', '.join(record.user.get_full_name() for record in existing)
            return self.conflict(f'Attendance already recorded on {day} for: {names}')

        try:
            with transaction.atomic():
                created = AttendanceRecord.objects.bulk_create([
                    AttendanceRecord(date=day, recorded_by=request.user, **entry)
                    for entry in entries
                ])
        except IntegrityError:
            return self.conflict(f'Attendance already recorded on {day}')

        logger.info(f"Recorded attendance for {len(created)} users on {day} by {request.user.email}")
        return success_response(
            self.get_serializer(created, many=True).data,
            message=f'Attendance recorded for {len(created)} users',
            status_code=status.HTTP_201_CREATED,
        )


class AttendanceDetailView(OrganizationScopedView):
    """
    GET /api/attendance/{id}/
    PUT /api/attendance/{id}/
    DELETE /api/attendance/{id}/
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = AttendanceRecord
    serializer_class = AttendanceRecordSerializer
    organization_lookup = 'user__organization'

    def get(self, request, record_id):
        record = self.get_object(record_id)
        if record is None:
            return self.not_found('Attendance record')
        return success_response(self.get_serializer(record).data)

    def put(self, request, record_id):
        record = self.get_object(record_id)
        if record is None:
            return self.not_found('Attendance record')
        serializer = self.get_serializer(record, data=request.data, partial=True)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        data = serializer.validated_data
        clash = AttendanceRecord.objects.filter(
            user=data.get('user', record.user), date=data.get('date', record.date)
        ).exclude(pk=record.pk)
        if clash.exists():
            return self.conflict(ALREADY_RECORDED)
        serializer.save()
        return success_response(serializer.data)

    def delete(self, request, record_id):
        record = self.get_object(record_id)
        if record is None:
            return self.not_found('Attendance record')
        record.delete()
        return success_response(message='Attendance record deleted')
