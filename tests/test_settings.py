"""
Project settings checks.
"""
from django.conf import settings
from django.conf import global_settings


def test_cache_is_left_at_django_default():
    assert settings.CACHES == global_settings.CACHES
    assert not hasattr(settings, 'REDIS_URL')
