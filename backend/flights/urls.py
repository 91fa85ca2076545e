from django.urls import path

from flights.views import FlightStatusView, HealthView, ItineraryView

urlpatterns = [
    path("health", HealthView.as_view(), name="health"),
    path("flight-status", FlightStatusView.as_view(), name="flight-status"),
    path("itinerary", ItineraryView.as_view(), name="itinerary"),
]
