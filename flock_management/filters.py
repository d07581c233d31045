"""
Query-string filters for the flock management list endpoints.
"""

from django_filters import rest_framework as filters

from .models import DailyProduction, MortalityRecord, FlockRecord, ProductionCycle, DispatchRecord


class FarmDateRangeFilter(filters.FilterSet):
    """farm / start_date / end_date, inclusive on both ends."""
    farm = filters.UUIDFilter(field_name='farm_id')
    start_date = filters.DateFilter(field_name='date', lookup_expr='gte')
    end_date = filters.DateFilter(field_name='date', lookup_expr='lte')


class DailyProductionFilter(FarmDateRangeFilter):
    shed = filters.UUIDFilter(field_name='shed_id')

    class Meta:
        model = DailyProduction
        fields = []


class MortalityRecordFilter(FarmDateRangeFilter):

    class Meta:
        model = MortalityRecord
        fields = []


class FlockRecordFilter(FarmDateRangeFilter):
    shed = filters.UUIDFilter(field_name='shed_id')

    class Meta:
        model = FlockRecord
        fields = []


class DispatchRecordFilter(FarmDateRangeFilter):

    class Meta:
        model = DispatchRecord
        fields = []


class ProductionCycleFilter(filters.FilterSet):
    farm = filters.UUIDFilter(field_name='farm_id')
    is_active = filters.BooleanFilter()

    class Meta:
        model = ProductionCycle
        fields = []
