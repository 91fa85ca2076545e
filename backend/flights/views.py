import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from flights.apps import get_status_service
from flights.exceptions import FlightStatusError, InvalidQuery
from flights.serializers import ItineraryRequestSerializer, validate_query
from flights.services.airports import get_airport_name
from flights.services.itinerary import EnrichedFlight, build_itinerary

logger = logging.getLogger(__name__)

ITINERARY_FAILED_MESSAGE = "One or more flights could not be retrieved."


def error_response(exc):
    return Response({"error": exc.message}, status=exc.status_code)


class HealthView(APIView):
    def get(self, request):
        return Response({"status": "ok"})


class FlightStatusView(APIView):
    def get(self, request):
        service = get_status_service()
        try:
            statuses = service.get_flight_status(request.query_params)
        except FlightStatusError as exc:
            return error_response(exc)
        except Exception:
            logger.exception("Unhandled error while fetching flight status.")
            return Response({"error": "Failed to fetch flight status."}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response([flight.to_dict() for flight in statuses])


class ItineraryView(APIView):
    def post(self, request):
        serializer = ItineraryRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": "Invalid itinerary request.", "details": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        entries = serializer.validated_data["flights"]
        name = serializer.validated_data.get("name")

        # Every flight is validated before any provider call is made.
        queries = []
        invalid = []
        for index, entry in enumerate(entries):
            try:
                queries.append(validate_query(entry))
            except InvalidQuery as exc:
                invalid.append({**_describe(entry, index), "error": exc.message})
        if invalid:
            return Response(
                {"error": InvalidQuery.default_message, "flights": invalid},
                status=status.HTTP_400_BAD_REQUEST,
            )

        service = get_status_service()
        results = service.lookup_many(queries)

        flights = []
        failures = []
        for index, (entry, query, (statuses, error)) in enumerate(zip(entries, queries, results)):
            flight = EnrichedFlight(
                id=entry.get("id") or str(index + 1),
                carrier_code=query.carrier_code,
                flight_number=query.flight_number,
                date=query.scheduled_departure_date,
                status=statuses[0] if statuses else None,
                error=error,
            )
            flights.append(flight)
            if error:
                failures.append({**_describe(entry, index), "error": error})

        # Any per-flight failure blocks the whole itinerary.
        if failures:
            return Response(
                {"error": ITINERARY_FAILED_MESSAGE, "flights": failures},
                status=status.HTTP_502_BAD_GATEWAY,
            )

        try:
            itinerary = build_itinerary(flights, name=name, airport_name=get_airport_name)
            payload = itinerary.to_dict()
        except Exception:
            logger.exception("Unhandled error while assembling itinerary.")
            return Response(
                {"error": "Failed to assemble itinerary."}, status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        return Response(payload)


def _describe(entry, index):
    return {
        "id": entry.get("id") or str(index + 1),
        "carrierCode": entry.get("carrierCode"),
        "flightNumber": entry.get("flightNumber"),
        "scheduledDepartureDate": entry.get("scheduledDepartureDate"),
    }
