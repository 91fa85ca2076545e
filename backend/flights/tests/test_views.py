from unittest.mock import patch

from django.test import Client, TestCase

from flights.providers.base import ProviderConfigError, ProviderHttpError, ProviderSdkError
from flights.services.cache import LookupCache
from flights.services.flight_status import FlightStatusService
from flights.tests.helpers import StubProvider, raw_flight

PARAMS = {"carrierCode": "DL", "flightNumber": "100", "scheduledDepartureDate": "2024-06-01"}


class ViewTestCase(TestCase):
    def setUp(self):
        self.client = Client()
        self.provider = StubProvider(
            {
                "DL-100-2024-06-01": [raw_flight()],
                "DL-200-2024-06-01": [
                    raw_flight(
                        number=200,
                        departure="2024-06-01T23:00",
                        arrival="2024-06-02T06:00",
                        origin="LAX",
                        destination="JFK",
                        duration="PT5H",
                    )
                ],
            }
        )
        self.factory_error = None
        self.service = FlightStatusService(self._factory, cache=LookupCache())
        patcher = patch("flights.views.get_status_service", return_value=self.service)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _factory(self):
        if self.factory_error is not None:
            raise self.factory_error
        return self.provider


class HealthViewTests(TestCase):
    def test_health(self):
        response = Client().get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})


class FlightStatusViewTests(ViewTestCase):
    def test_success(self):
        response = self.client.get("/api/flight-status", PARAMS)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body), 1)
        self.assertEqual(body[0]["flightDesignator"], {"carrierCode": "DL", "flightNumber": "100"})
        self.assertEqual(body[0]["departureAirport"], "JFK")
        self.assertEqual(body[0]["duration"], "PT6H30M")

    def test_repeat_request_is_served_from_cache(self):
        first = self.client.get("/api/flight-status", PARAMS)
        second = self.client.get("/api/flight-status", PARAMS)
        self.assertEqual(first.content, second.content)
        self.assertEqual(len(self.provider.calls), 1)

    def test_invalid_query(self):
        response = self.client.get("/api/flight-status", {**PARAMS, "carrierCode": "D"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid query parameters provided."})
        self.assertEqual(self.provider.calls, [])

    def test_not_found(self):
        response = self.client.get("/api/flight-status", {**PARAMS, "flightNumber": "1"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Flight not found for the given details."})

    def test_configuration_missing(self):
        self.factory_error = ProviderConfigError()
        response = self.client.get("/api/flight-status", PARAMS)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Internal server error: API configuration missing."})

    def test_provider_http_error_status_propagates(self):
        self.provider.error = ProviderHttpError(429, "Too many requests", "Rate limit exceeded")
        response = self.client.get("/api/flight-status", PARAMS)
        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.json(), {"error": "Amadeus API Error: Too many requests - Rate limit exceeded"})

    def test_unexpected_error_does_not_escape(self):
        self.provider.error = RuntimeError("boom")
        response = self.client.get("/api/flight-status", PARAMS)
        self.assertEqual(response.status_code, 500)
        self.assertIn("error", response.json())


class ItineraryViewTests(ViewTestCase):
    def post(self, payload):
        return self.client.post("/api/itinerary", payload, content_type="application/json")

    def test_assembles_itinerary(self):
        response = self.post(
            {
                "name": "Coast to coast",
                "flights": [
                    {"id": "b", "carrierCode": "DL", "flightNumber": "200", "scheduledDepartureDate": "2024-06-01"},
                    {"id": "a", **PARAMS},
                ],
            }
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["bookingCode"], "COASTT")
        self.assertEqual(body["flightCount"], 2)
        self.assertEqual(len(body["groups"]), 1)
        flights = body["groups"][0]["flights"]
        self.assertEqual([f["id"] for f in flights], ["a", "b"])
        self.assertFalse(flights[0]["isOvernight"])
        self.assertTrue(flights[1]["isOvernight"])
        self.assertEqual(flights[1]["duration"], "5h")
        self.assertEqual(flights[1]["origin"], "LAX")

    def test_any_failure_blocks_itinerary(self):
        response = self.post(
            {
                "flights": [
                    PARAMS,
                    {"carrierCode": "DL", "flightNumber": "300", "scheduledDepartureDate": "2024-06-01"},
                ]
            }
        )
        self.assertEqual(response.status_code, 502)
        body = response.json()
        self.assertEqual(body["error"], "One or more flights could not be retrieved.")
        self.assertEqual(len(body["flights"]), 1)
        self.assertEqual(body["flights"][0]["flightNumber"], "300")
        self.assertEqual(body["flights"][0]["error"], "Flight not found for the given details.")

    def test_provider_failure_is_reported_per_flight(self):
        self.provider.error = ProviderSdkError("connection reset")
        response = self.post({"flights": [PARAMS]})
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["flights"][0]["error"], "connection reset")

    def test_invalid_entry_rejected_before_lookup(self):
        response = self.post({"flights": [PARAMS, {**PARAMS, "scheduledDepartureDate": "2024-02-30"}]})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "Invalid query parameters provided.")
        self.assertEqual(body["flights"][0]["id"], "2")
        self.assertEqual(self.provider.calls, [])

    def test_malformed_body(self):
        self.assertEqual(self.post({"flights": []}).status_code, 400)
        self.assertEqual(self.post({"name": "x"}).status_code, 400)

    def test_too_many_flights(self):
        with self.settings(ITINERARY_MAX_FLIGHTS=1):
            response = self.post({"flights": [PARAMS, PARAMS]})
        self.assertEqual(response.status_code, 400)

    def test_assembly_failure_returns_json_error(self):
        with patch("flights.views.build_itinerary", side_effect=AttributeError("bad dataset")):
            response = self.post({"flights": [PARAMS]})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Failed to assemble itinerary."})
