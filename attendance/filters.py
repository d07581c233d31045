from django_filters import rest_framework as filters

from .models import AttendanceRecord


class AttendanceRecordFilter(filters.FilterSet):
    date = filters.DateFilter(field_name='date')
    start_date = filters.DateFilter(field_name='date', lookup_expr='gte')
    end_date = filters.DateFilter(field_name='date', lookup_expr='lte')
    user = filters.UUIDFilter(field_name='user_id')
    status = filters.CharFilter(method='filter_status')

    class Meta:
        model = AttendanceRecord
        fields = []

    def filter_status(self, queryset, name, value):
        return queryset.filter(status=value.upper())
