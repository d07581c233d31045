from django.contrib.auth import get_user_model
from rest_framework import serializers

from core.api import run_model_clean
from .models import AttendanceRecord

User = get_user_model()


class OrganizationUserField(serializers.PrimaryKeyRelatedField):
    def get_queryset(self):
        request = self.context['request']
        return User.objects.filter(organization=request.user.organization, is_active=True)


class AttendanceRecordSerializer(serializers.ModelSerializer):
    user = OrganizationUserField()
    user_name = serializers.CharField(source='user.get_full_name', read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = (
            'id', 'user', 'user_name', 'date', 'status', 'check_in', 'check_out',
            'notes', 'recorded_by', 'created_at', 'updated_at'
        )
        read_only_fields = ('id', 'recorded_by', 'created_at', 'updated_at')
        validators = []

    def validate(self, attrs):
        run_model_clean(AttendanceRecord, attrs, self.instance)
        return attrs


class BulkAttendanceEntrySerializer(serializers.Serializer):
    user = OrganizationUserField()
    status = serializers.ChoiceField(choices=AttendanceRecord.Status.choices)
    check_in = serializers.TimeField(required=False, allow_null=True)
    check_out = serializers.TimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class BulkAttendanceSerializer(serializers.Serializer):
    """``{date, records: [{user, status, ...}, ...]}`` for a whole day."""
    date = serializers.DateField()
    records = BulkAttendanceEntrySerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        users = [entry['user'].pk for entry in attrs['records']]
        if len(users) != len(set(users)):
            raise serializers.ValidationError({'records': 'Each user may appear only once.'})
        for entry in attrs['records']:
            run_model_clean(AttendanceRecord, dict(entry, date=attrs['date']))
        return attrs
