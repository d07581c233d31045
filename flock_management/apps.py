from django.apps import AppConfig


class FlockManagementConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "flock_management"

    def ready(self):
        """
        Import signals to register them when the app is ready.

        This keeps farm bird counts in step with recorded mortality.
        """
        import flock_management.signals  # noqa: F401
