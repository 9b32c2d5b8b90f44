from django.apps import AppConfig


class TicketingConfig(AppConfig):
    """Registers the ticketing signal receivers on startup."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "ticketing"

    def ready(self) -> None:
        from ticketing import signals  # noqa: F401
