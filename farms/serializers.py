from django.db.models import Sum
from rest_framework import serializers

from .models import Farm, Shed


class ShedSerializer(serializers.ModelSerializer):
    farm_name = serializers.CharField(source='farm.name', read_only=True)

    class Meta:
        model = Shed
        fields = ('id', 'farm', 'farm_name', 'name', 'capacity', 'description', 'is_active', 'created_at')
        read_only_fields = ('id', 'created_at')
        validators = []

    def validate_farm(self, value):
        organization = self.context['request'].user.organization
        if value.organization_id != organization.id:
            raise serializers.ValidationError("Farm not found.")
        return value

    def validate(self, attrs):
        farm = attrs.get('farm', getattr(self.instance, 'farm', None))
        name = attrs.get('name', getattr(self.instance, 'name', None))
        duplicates = Shed.objects.filter(farm=farm, name=name)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError({'name': 'A shed with this name already exists on this farm.'})
        return attrs


class FarmSerializer(serializers.ModelSerializer):
    manager_name = serializers.CharField(source='manager.get_full_name', read_only=True, default=None)
    total_birds = serializers.IntegerField(read_only=True)
    shed_count = serializers.SerializerMethodField()
    total_capacity = serializers.SerializerMethodField()

    class Meta:
        model = Farm
        fields = (
            'id', 'name', 'location', 'description', 'manager', 'manager_name',
            'male_count', 'female_count', 'total_birds', 'shed_count',
            'total_capacity', 'is_active', 'created_at', 'updated_at'
        )
        read_only_fields = ('id', 'created_at', 'updated_at')

    def get_shed_count(self, obj):
        return obj.sheds.filter(is_active=True).count()

    def get_total_capacity(self, obj):
        return obj.sheds.filter(is_active=True).aggregate(total=Sum('capacity'))['total'] or 0

    def validate_manager(self, value):
        if value is None:
            return value
        organization = self.context['request'].user.organization
        if value.organization_id != organization.id:
            raise serializers.ValidationError("Manager must belong to the same organization.")
        if value.role not in ('OWNER', 'MANAGER'):
            raise serializers.ValidationError("Only owners and managers can manage a farm.")
        return value

    def validate_name(self, value):
        organization = self.context['request'].user.organization
        duplicates = Farm.objects.filter(organization=organization, name__iexact=value)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("A farm with this name already exists.")
        return value
