from django.apps import AppConfig


class WebinarsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "webinars"

    def ready(self) -> None:
        from webinars import signals  # noqa: F401
