"""
URL configuration for core project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    path('', RedirectView.as_view(url='/admin/', permanent=False)),
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.auth_urls')),
    path('api/', include('accounts.urls')),  # Organization, users, job roles, notification settings
    path('api/', include('farms.urls')),  # Farms and sheds
    path('api/', include('flock_management.urls')),  # Production, mortality, flock records, cycles
    path('api/attendance/', include('attendance.urls')),
    path('api/', include('dashboards.urls')),  # Dashboard, reports, alerts, cron triggers
]
