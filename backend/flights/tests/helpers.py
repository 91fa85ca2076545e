import json

import requests


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def raw_flight(
    carrier="DL",
    number=100,
    date="2024-06-01",
    departure="2024-06-01T08:00-04:00",
    arrival="2024-06-01T11:30-07:00",
    origin="JFK",
    destination="LAX",
    duration="PT6H30M",
    legs=True,
    segments=True,
    points=True,
):
    flight = {
        "type": "DatedFlight",
        "scheduledDepartureDate": date,
        "flightDesignator": {"carrierCode": carrier, "flightNumber": number},
    }
    if points:
        flight["flightPoints"] = [
            {
                "iataCode": origin,
                "departure": {
                    "terminal": {"code": "4"},
                    "gate": {"mainGate": "B22"},
                    "timings": [{"qualifier": "STD", "value": departure}],
                },
            },
            {
                "iataCode": destination,
                "arrival": {
                    "terminal": {"code": "2"},
                    "timings": [{"qualifier": "STA", "value": arrival}],
                },
            },
        ]
    if segments:
        flight["segments"] = [
            {
                "boardPointIataCode": origin,
                "offPointIataCode": destination,
                "scheduledSegmentDuration": duration,
            }
        ]
    if legs:
        flight["legs"] = [
            {
                "boardPointIataCode": origin,
                "offPointIataCode": destination,
                "aircraftEquipment": {"aircraftType": "321"},
                "scheduledLegDuration": duration,
            }
        ]
    return flight


def http_error(status_code, body):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(body).encode("utf-8") if not isinstance(body, bytes) else body
    return requests.HTTPError(f"{status_code} Error", response=response)


class StubProvider:
    def __init__(self, results=None, error=None):
        self.results = results or {}
        self.error = error
        self.calls = []

    def lookup(self, query):
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        return self.results.get(query.cache_key, [])
