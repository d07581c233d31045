from rest_framework import serializers

from core.api import run_model_clean
from farms.models import Farm, Shed
from .models import DailyProduction, MortalityRecord, FlockRecord, ProductionCycle, DispatchRecord


class OrganizationFarmField(serializers.PrimaryKeyRelatedField):
    """Farm lookup limited to the requesting user's organization."""

    def get_queryset(self):
        request = self.context['request']
        return Farm.objects.filter(organization=request.user.organization)


class OrganizationShedField(serializers.PrimaryKeyRelatedField):
    def get_queryset(self):
        request = self.context['request']
        return Shed.objects.filter(farm__organization=request.user.organization)


class DailyProductionSerializer(serializers.ModelSerializer):
    farm = OrganizationFarmField()
    shed = OrganizationShedField(required=False, allow_null=True)
    farm_name = serializers.CharField(source='farm.name', read_only=True)
    shed_name = serializers.CharField(source='shed.name', read_only=True, default=None)
    total_daily_eggs = serializers.IntegerField(read_only=True)
    sellable_eggs = serializers.IntegerField(read_only=True)
    waste_eggs = serializers.IntegerField(read_only=True)
    recorded_by_name = serializers.CharField(source='recorded_by.get_full_name', read_only=True, default=None)

    class Meta:
        model = DailyProduction
        fields = (
            'id', 'farm', 'farm_name', 'shed', 'shed_name', 'date',
            'table_eggs', 'hatching_eggs', 'cracked_eggs', 'jumbo_eggs', 'leaker_eggs',
            'total_eggs', 'broken_eggs', 'damaged_eggs',
            'total_daily_eggs', 'sellable_eggs', 'waste_eggs',
            'notes', 'recorded_by', 'recorded_by_name', 'created_at', 'updated_at'
        )
        read_only_fields = ('id', 'recorded_by', 'created_at', 'updated_at')
        validators = []

    def validate(self, attrs):
        run_model_clean(DailyProduction, attrs, self.instance)
        return attrs


class MortalityRecordSerializer(serializers.ModelSerializer):
    farm = OrganizationFarmField()
    farm_name = serializers.CharField(source='farm.name', read_only=True)
    total_mortality = serializers.IntegerField(read_only=True)

    class Meta:
        model = MortalityRecord
        fields = (
            'id', 'farm', 'farm_name', 'production', 'date', 'male_mortality',
            'female_mortality', 'total_mortality', 'notes', 'recorded_by', 'created_at'
        )
        read_only_fields = ('id', 'recorded_by', 'created_at')

    def validate_production(self, value):
        if value is not None and value.farm.organization_id != self.context['request'].user.organization_id:
            raise serializers.ValidationError("Production record not found.")
        return value

    def validate(self, attrs):
        run_model_clean(MortalityRecord, attrs, self.instance)
        return attrs


class FlockRecordSerializer(serializers.ModelSerializer):
    farm = OrganizationFarmField()
    shed = OrganizationShedField(required=False, allow_null=True)
    farm_name = serializers.CharField(source='farm.name', read_only=True)

    class Meta:
        model = FlockRecord
        fields = (
            'id', 'farm', 'farm_name', 'shed', 'date', 'age_weeks', 'age_day_of_week',
            'opening_male', 'opening_female', 'mortality_male', 'mortality_female',
            'closing_male', 'closing_female', 'notes', 'recorded_by', 'created_at'
        )
        read_only_fields = ('id', 'closing_male', 'closing_female', 'recorded_by', 'created_at')
        validators = []

    def validate(self, attrs):
        run_model_clean(FlockRecord, attrs, self.instance)
        return attrs


class ProductionCycleSerializer(serializers.ModelSerializer):
    farm = OrganizationFarmField()
    farm_name = serializers.CharField(source='farm.name', read_only=True)
    current_week = serializers.SerializerMethodField()
    progress_percent = serializers.SerializerMethodField()
    expected_end_date = serializers.DateField(read_only=True)

    class Meta:
        model = ProductionCycle
        fields = (
            'id', 'farm', 'farm_name', 'name', 'start_date', 'start_week',
            'expected_end_week', 'expected_end_date', 'is_active', 'current_week',
            'progress_percent', 'created_at', 'updated_at'
        )
        read_only_fields = ('id', 'created_at', 'updated_at')
        validators = []

    def get_current_week(self, obj):
        return obj.current_week()

    def get_progress_percent(self, obj):
        return obj.progress_percent()

    def validate(self, attrs):
        attrs_with_org = dict(attrs, organization=self.context['request'].user.organization)
        run_model_clean(ProductionCycle, attrs_with_org, self.instance)
        return attrs


class DispatchRecordSerializer(serializers.ModelSerializer):
    farm = OrganizationFarmField()
    farm_name = serializers.CharField(source='farm.name', read_only=True)
    farm_location = serializers.CharField(source='farm.location', read_only=True)
    total_dispatched = serializers.IntegerField(read_only=True)

    class Meta:
        model = DispatchRecord
        fields = (
            'id', 'farm', 'farm_name', 'farm_location', 'production', 'date',
            'table_eggs', 'hatching_eggs', 'cracked_eggs', 'jumbo_eggs', 'leaker_eggs',
            'total_dispatched', 'notes', 'recorded_by', 'created_at', 'updated_at'
        )
        read_only_fields = ('id', 'recorded_by', 'created_at', 'updated_at')

    def validate_production(self, value):
        if value is not None and value.farm.organization_id != self.context['request'].user.organization_id:
            raise serializers.ValidationError("Production record not found.")
        return value

    def validate(self, attrs):
        run_model_clean(DispatchRecord, attrs, self.instance)
        return attrs
