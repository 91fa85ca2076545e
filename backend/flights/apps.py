from django.apps import AppConfig
from django.conf import settings


class FlightsConfig(AppConfig):
    name = "flights"
    default_auto_field = "django.db.models.BigAutoField"

    status_service = None

    def ready(self):
        from flights.providers import get_flight_provider
        from flights.services.cache import LookupCache
        from flights.services.flight_status import FlightStatusService

        # One cache for the lifetime of the process.
        self.status_service = FlightStatusService(
            provider_factory=get_flight_provider,
            cache=LookupCache(ttl_seconds=getattr(settings, "FLIGHT_STATUS_CACHE_TTL", 60 * 60 * 24)),
            max_workers=getattr(settings, "ITINERARY_MAX_WORKERS", 4),
        )


def get_status_service():
    from django.apps import apps

    return apps.get_app_config("flights").status_service
