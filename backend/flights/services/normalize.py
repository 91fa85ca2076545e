import copy
import re
from dataclasses import dataclass, field
from typing import Optional

DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?")


def parse_duration_to_minutes(value) -> Optional[int]:
    """Minutes in an ISO-8601 ``PT{h}H{m}M`` duration, or None when absent or unparseable."""
    if not value or not isinstance(value, str):
        return None
    match = DURATION_RE.fullmatch(value.strip())
    if not match or (match.group(1) is None and match.group(2) is None):
        return None
    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    return hours * 60 + minutes


def _dig(value, *path):
    for step in path:
        if isinstance(step, int):
            if not isinstance(value, (list, tuple)) or len(value) <= step or step < -len(value):
                return None
        elif not isinstance(value, dict):
            return None
        value = value[step] if isinstance(step, int) else value.get(step)
    return value


def _text(value) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _dicts(value) -> tuple:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(copy.deepcopy(item) for item in value if isinstance(item, dict))


@dataclass(frozen=True)
class Endpoints:
    origin: str
    destination: str


# Endpoint strategies, tried in order: legs, then segments, then flight points.

def _endpoints_from_legs(legs, segments, points) -> Optional[Endpoints]:
    origin = _text(_dig(legs, 0, "boardPointIataCode"))
    destination = _text(_dig(legs, -1, "offPointIataCode"))
    if origin and destination:
        return Endpoints(origin, destination)
    return None


def _endpoints_from_segments(legs, segments, points) -> Optional[Endpoints]:
    origin = _text(_dig(segments, 0, "boardPointIataCode"))
    destination = _text(_dig(segments, -1, "offPointIataCode"))
    if origin and destination:
        return Endpoints(origin, destination)
    return None


def _endpoints_from_points(legs, segments, points) -> Optional[Endpoints]:
    # Positional: the first point is the origin and the second the destination.
    origin = _text(_dig(points, 0, "iataCode"))
    destination = _text(_dig(points, 1, "iataCode"))
    if origin and destination:
        return Endpoints(origin, destination)
    return None


ENDPOINT_STRATEGIES = (_endpoints_from_legs, _endpoints_from_segments, _endpoints_from_points)


def extract_endpoints(legs=None, segments=None, points=None) -> Optional[Endpoints]:
    for strategy in ENDPOINT_STRATEGIES:
        endpoints = strategy(legs, segments, points)
        if endpoints is not None:
            return endpoints
    return None


def extract_duration(legs=None, segments=None) -> Optional[str]:
    return _text(_dig(legs, 0, "scheduledLegDuration")) or _text(_dig(segments, 0, "scheduledSegmentDuration"))


@dataclass(frozen=True)
class FlightDesignator:
    carrier_code: Optional[str]
    flight_number: Optional[str]

    def to_dict(self):
        return {"carrierCode": self.carrier_code, "flightNumber": self.flight_number}


@dataclass(frozen=True)
class CanonicalFlightStatus:
    """One flight as returned to callers, whatever sub-shapes the provider populated.

    Instances are shared between the lookup cache and every caller; use
    ``to_dict`` for a private, mutable copy.
    """

    type: Optional[str]
    scheduled_departure_date: Optional[str]
    flight_designator: FlightDesignator
    departure_airport: Optional[str] = None
    departure_timestamp: Optional[str] = None
    departure_terminal: Optional[str] = None
    departure_gate: Optional[str] = None
    arrival_airport: Optional[str] = None
    arrival_timestamp: Optional[str] = None
    arrival_terminal: Optional[str] = None
    arrival_gate: Optional[str] = None
    aircraft_type: Optional[str] = None
    duration: Optional[str] = None
    legs: tuple = field(default=())
    segments: tuple = field(default=())
    flight_points: tuple = field(default=())

    def to_dict(self):
        return {
            "type": self.type,
            "scheduledDepartureDate": self.scheduled_departure_date,
            "flightDesignator": self.flight_designator.to_dict(),
            "departureAirport": self.departure_airport,
            "departureTimestamp": self.departure_timestamp,
            "departureTerminal": self.departure_terminal,
            "departureGate": self.departure_gate,
            "arrivalAirport": self.arrival_airport,
            "arrivalTimestamp": self.arrival_timestamp,
            "arrivalTerminal": self.arrival_terminal,
            "arrivalGate": self.arrival_gate,
            "aircraftType": self.aircraft_type,
            "duration": self.duration,
            "legs": copy.deepcopy(list(self.legs)),
            "segments": copy.deepcopy(list(self.segments)),
            "flightPoints": copy.deepcopy(list(self.flight_points)),
        }


def normalize_flight_status(raw) -> CanonicalFlightStatus:
    raw = raw if isinstance(raw, dict) else {}
    legs = _dicts(raw.get("legs"))
    segments = _dicts(raw.get("segments"))
    points = _dicts(raw.get("flightPoints"))

    endpoints = extract_endpoints(legs, segments, points)
    designator = raw.get("flightDesignator") if isinstance(raw.get("flightDesignator"), dict) else {}

    return CanonicalFlightStatus(
        type=_text(raw.get("type")),
        scheduled_departure_date=_text(raw.get("scheduledDepartureDate")),
        flight_designator=FlightDesignator(
            carrier_code=_text(designator.get("carrierCode")),
            flight_number=_text(designator.get("flightNumber")),
        ),
        departure_airport=endpoints.origin if endpoints else None,
        departure_timestamp=_text(_dig(points, 0, "departure", "timings", 0, "value")),
        departure_terminal=_text(_dig(points, 0, "departure", "terminal", "code")),
        departure_gate=_text(_dig(points, 0, "departure", "gate", "mainGate")),
        arrival_airport=endpoints.destination if endpoints else None,
        arrival_timestamp=_text(_dig(points, 1, "arrival", "timings", 0, "value")),
        arrival_terminal=_text(_dig(points, 1, "arrival", "terminal", "code")),
        arrival_gate=_text(_dig(points, 1, "arrival", "gate", "mainGate")),
        aircraft_type=_text(_dig(legs, 0, "aircraftEquipment", "aircraftType")),
        duration=extract_duration(legs, segments),
        legs=legs,
        segments=segments,
        flight_points=points,
    )


def normalize_flight_statuses(raw_flights) -> tuple:
    return tuple(normalize_flight_status(flight) for flight in raw_flights or [])
