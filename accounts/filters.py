from django_filters import rest_framework as filters

from .models import User


class UserFilter(filters.FilterSet):
    """
    ``is_active`` defaults to active users only; ``all`` lifts the filter.
    """
    role = filters.CharFilter(method='filter_role')
    is_active = filters.ChoiceFilter(
        choices=[('true', 'Active'), ('false', 'Inactive'), ('all', 'All')],
        method='filter_is_active',
    )
    supervisor = filters.UUIDFilter(field_name='supervisor_id')

    class Meta:
        model = User
        fields = []

    def filter_role(self, queryset, name, value):
        return queryset.filter(role=value.upper())

    def filter_is_active(self, queryset, name, value):
        if value == 'all':
            return queryset
        return queryset.filter(is_active=value == 'true')

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        if not self.form.cleaned_data.get('is_active'):
            queryset = queryset.filter(is_active=True)
        return queryset
