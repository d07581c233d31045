from django_filters import rest_framework as filters

from .models import Farm, Shed


class FarmFilter(filters.FilterSet):
    is_active = filters.BooleanFilter()
    manager = filters.UUIDFilter(field_name='manager_id')

    class Meta:
        model = Farm
        fields = []


class ShedFilter(filters.FilterSet):
    farm = filters.UUIDFilter(field_name='farm_id')
    is_active = filters.BooleanFilter()

    class Meta:
        model = Shed
        fields = []
