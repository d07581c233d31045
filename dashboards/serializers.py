from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import serializers

from core.api import run_model_clean
from flock_management.serializers import OrganizationFarmField, OrganizationShedField
from .models import ScheduledReport
from .services.reports import InvalidReportWindow, ReportRequest, REPORT_TYPE_LABELS
from .services.scheduler import calculate_next_send

User = get_user_model()


class OrganizationManagerField(serializers.PrimaryKeyRelatedField):
    def get_queryset(self):
        request = self.context['request']
        return User.objects.filter(
            organization=request.user.organization,
            role__in=[User.UserRole.OWNER, User.UserRole.MANAGER],
        )


class ScheduledReportSerializer(serializers.ModelSerializer):
    farm = OrganizationFarmField(required=False, allow_null=True)
    shed = OrganizationShedField(required=False, allow_null=True)
    manager = OrganizationManagerField(required=False, allow_null=True)
    recipients = serializers.ListField(child=serializers.EmailField(), allow_empty=False)

    class Meta:
        model = ScheduledReport
        fields = (
            'id', 'report_type', 'recipients', 'is_active',
            'farm', 'shed', 'manager',
            'last_sent', 'next_send', 'last_error',
            'created_by', 'created_at', 'updated_at'
        )
        read_only_fields = (
            'id', 'last_sent', 'next_send', 'last_error',
            'created_by', 'created_at', 'updated_at'
        )

    def validate(self, attrs):
        organization = self.context['request'].user.organization
        run_model_clean(ScheduledReport, {**attrs, 'organization': organization}, self.instance)
        return attrs

    def create(self, validated_data):
        validated_data['next_send'] = calculate_next_send(validated_data['report_type'], timezone.now())
        return super().create(validated_data)

    def update(self, instance, validated_data):
        report_type = validated_data.get('report_type')
        if report_type and report_type != instance.report_type:
            validated_data['next_send'] = calculate_next_send(report_type, timezone.now())
        return super().update(instance, validated_data)


class ReportRequestSerializer(serializers.Serializer):
    report_type = serializers.ChoiceField(choices=list(REPORT_TYPE_LABELS), default='comprehensive')
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)
    farm_id = serializers.UUIDField(required=False, allow_null=True)
    shed_id = serializers.UUIDField(required=False, allow_null=True)
    manager_id = serializers.UUIDField(required=False, allow_null=True)

    def validate(self, attrs):
        try:
            self.build_request(attrs).checked_window()
        except InvalidReportWindow as exc:
            raise serializers.ValidationError({exc.field: str(exc)})
        return attrs

    def to_request(self):
        return self.build_request(self.validated_data)

    @staticmethod
    def build_request(data):
        def as_str(key):
            return str(data[key]) if data.get(key) else None

        return ReportRequest(
            report_type=data['report_type'],
            start_date=data.get('start_date'),
            end_date=data.get('end_date'),
            farm_id=as_str('farm_id'),
            shed_id=as_str('shed_id'),
            manager_id=as_str('manager_id'),
        )


class AnalyticsQuerySerializer(serializers.Serializer):
    """Query parameters shared by the dashboard and analytics endpoints."""
    days = serializers.IntegerField(required=False, min_value=1, max_value=365)
    weeks = serializers.IntegerField(required=False, min_value=1, max_value=52, default=12)
    farm = serializers.UUIDField(required=False, allow_null=True)
