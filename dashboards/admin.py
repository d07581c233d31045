from django.contrib import admin

from .models import ScheduledReport


@admin.register(ScheduledReport)
class ScheduledReportAdmin(admin.ModelAdmin):
    list_display = ('organization', 'report_type', 'is_active', 'last_sent', 'next_send')
    list_filter = ('report_type', 'is_active')
    search_fields = ('organization__name',)
    readonly_fields = ('last_sent', 'last_error', 'created_at', 'updated_at')
