"""
Admin interface for production tracking.
"""

from django.contrib import admin
from .models import DailyProduction, MortalityRecord, FlockRecord, ProductionCycle, DispatchRecord


# =============================================================================
# DAILY PRODUCTION ADMIN
# =============================================================================

@admin.register(DailyProduction)
class DailyProductionAdmin(admin.ModelAdmin):
    list_display = [
        'date', 'farm', 'shed', 'total_daily_eggs', 'sellable_eggs',
        'waste_eggs', 'recorded_by'
    ]
    list_filter = ['date', 'farm']
    search_fields = ['farm__name', 'shed__name']
    date_hierarchy = 'date'
    readonly_fields = ['total_daily_eggs', 'sellable_eggs', 'waste_eggs', 'created_at', 'updated_at']

    fieldsets = [
        ('Where & When', {
            'fields': ['farm', 'shed', 'date', 'recorded_by']
        }),
        ('Egg Categories', {
            'fields': ['table_eggs', 'hatching_eggs', 'cracked_eggs', 'jumbo_eggs', 'leaker_eggs']
        }),
        ('Older Records', {
            'fields': ['total_eggs', 'broken_eggs', 'damaged_eggs'],
            'classes': ['collapse']
        }),
        ('Derived Totals', {
            'fields': ['total_daily_eggs', 'sellable_eggs', 'waste_eggs']
        }),
        ('Notes', {
            'fields': ['notes', 'created_at', 'updated_at']
        }),
    ]


@admin.register(MortalityRecord)
class MortalityRecordAdmin(admin.ModelAdmin):
    list_display = ['date', 'farm', 'male_mortality', 'female_mortality', 'recorded_by']
    list_filter = ['date', 'farm']
    date_hierarchy = 'date'


@admin.register(FlockRecord)
class FlockRecordAdmin(admin.ModelAdmin):
    list_display = [
        'date', 'farm', 'shed', 'age_weeks', 'opening_male', 'opening_female',
        'closing_male', 'closing_female'
    ]
    list_filter = ['date', 'farm']
    readonly_fields = ['closing_male', 'closing_female']


@admin.register(ProductionCycle)
class ProductionCycleAdmin(admin.ModelAdmin):
    list_display = ['name', 'farm', 'start_date', 'start_week', 'expected_end_week', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'farm__name']


@admin.register(DispatchRecord)
class DispatchRecordAdmin(admin.ModelAdmin):
    list_display = ['date', 'farm', 'total_dispatched', 'table_eggs', 'hatching_eggs', 'recorded_by']
    list_filter = ['date', 'farm']
    date_hierarchy = 'date'
    readonly_fields = ['total_dispatched', 'created_at', 'updated_at']
