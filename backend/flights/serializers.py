from datetime import date

from django.conf import settings
from rest_framework import serializers

from flights.exceptions import InvalidQuery
from flights.types import FlightQuery

FLIGHT_NUMBER_PATTERN = r"^[0-9]{1,4}\Z"
DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}\Z"


class FlightQuerySerializer(serializers.Serializer):
    # Values are taken literally: no trimming, case folding or zero padding.
    carrierCode = serializers.CharField(min_length=2, max_length=3, trim_whitespace=False)
    flightNumber = serializers.RegexField(FLIGHT_NUMBER_PATTERN, trim_whitespace=False)
    scheduledDepartureDate = serializers.RegexField(DATE_PATTERN, trim_whitespace=False)

    def validate_scheduledDepartureDate(self, value):
        try:
            date.fromisoformat(value)
        except ValueError:
            raise serializers.ValidationError("Date must be a real calendar date.")
        return value

    def to_query(self):
        data = self.validated_data
        return FlightQuery(
            carrier_code=data["carrierCode"],
            flight_number=data["flightNumber"],
            scheduled_departure_date=date.fromisoformat(data["scheduledDepartureDate"]),
        )


def validate_query(raw):
    """Return a FlightQuery for ``raw`` or raise InvalidQuery. No partial acceptance."""
    if not hasattr(raw, "get"):
        raise InvalidQuery()
    serializer = FlightQuerySerializer(
        data={
            "carrierCode": raw.get("carrierCode"),
            "flightNumber": raw.get("flightNumber"),
            "scheduledDepartureDate": raw.get("scheduledDepartureDate"),
        }
    )
    if not serializer.is_valid():
        raise InvalidQuery(errors=serializer.errors)
    return serializer.to_query()


class ItineraryFlightSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, max_length=64)
    carrierCode = serializers.CharField(trim_whitespace=False)
    flightNumber = serializers.CharField(trim_whitespace=False)
    scheduledDepartureDate = serializers.CharField(trim_whitespace=False)


class ItineraryRequestSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=120)
    flights = ItineraryFlightSerializer(many=True, allow_empty=False)

    def validate_flights(self, value):
        limit = getattr(settings, "ITINERARY_MAX_FLIGHTS", 10)
        if len(value) > limit:
            raise serializers.ValidationError(f"An itinerary may contain at most {limit} flights.")
        return value
