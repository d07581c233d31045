from django.contrib import admin

from .models import Farm, Shed


class ShedInline(admin.TabularInline):
    model = Shed
    extra = 0
    fields = ('name', 'capacity', 'is_active')


@admin.register(Farm)
class FarmAdmin(admin.ModelAdmin):
    list_display = ('name', 'organization', 'manager', 'male_count', 'female_count', 'is_active')
    list_filter = ('is_active', 'organization')
    search_fields = ('name', 'location')
    inlines = [ShedInline]


@admin.register(Shed)
class ShedAdmin(admin.ModelAdmin):
    list_display = ('name', 'farm', 'capacity', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name', 'farm__name')
