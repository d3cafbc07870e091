from django.apps import AppConfig


class ItsmConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "itsm"
    verbose_name = "Problems, changes & assets"

    def ready(self):
        from . import signals  # noqa
