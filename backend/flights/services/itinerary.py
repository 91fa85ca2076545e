import random
import re
import string
from dataclasses import dataclass
from datetime import date as Date, datetime, timezone
from typing import Callable, Optional

from django.utils.dateparse import parse_date, parse_datetime

from flights.services.normalize import CanonicalFlightStatus, extract_endpoints, parse_duration_to_minutes

BOOKING_CODE_LENGTH = 6
BOOKING_CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class EnrichedFlight:
    id: str
    carrier_code: str
    flight_number: str
    date: Optional[Date] = None
    status: Optional[CanonicalFlightStatus] = None
    error: Optional[str] = None
    is_loading: bool = False


@dataclass(frozen=True)
class AssembledFlight:
    flight: EnrichedFlight
    origin: Optional[str]
    origin_name: str
    destination: Optional[str]
    destination_name: str
    departure: Optional[datetime]
    arrival: Optional[datetime]
    is_overnight: bool
    duration: str

    def to_dict(self):
        flight = self.flight
        return {
            "id": flight.id,
            "carrierCode": flight.carrier_code,
            "flightNumber": flight.flight_number,
            "date": flight.date.isoformat() if flight.date else None,
            "origin": self.origin,
            "originName": self.origin_name,
            "destination": self.destination,
            "destinationName": self.destination_name,
            "departure": self.departure.isoformat() if self.departure else None,
            "arrival": self.arrival.isoformat() if self.arrival else None,
            "isOvernight": self.is_overnight,
            "duration": self.duration,
            "status": flight.status.to_dict() if flight.status else None,
        }


@dataclass(frozen=True)
class FlightGroup:
    date: Date
    flights: tuple

    def to_dict(self):
        return {"date": self.date.isoformat(), "flights": [f.to_dict() for f in self.flights]}


@dataclass(frozen=True)
class Itinerary:
    name: Optional[str]
    booking_code: str
    groups: tuple

    @property
    def flight_count(self):
        return sum(len(group.flights) for group in self.groups)

    def to_dict(self):
        return {
            "name": self.name,
            "bookingCode": self.booking_code,
            "flightCount": self.flight_count,
            "groups": [group.to_dict() for group in self.groups],
        }


def format_duration(value) -> str:
    """``"PT2H30M"`` -> ``"2h 30m"``; zero parts are omitted; anything unparseable is ``"N/A"``."""
    total = parse_duration_to_minutes(value)
    if total is None:
        return "N/A"
    hours, minutes = divmod(total, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    return " ".join(parts) or "0m"


def parse_timestamp(value) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        return parse_datetime(value)
    except ValueError:
        return None


def is_overnight(departure: Optional[datetime], arrival: Optional[datetime]) -> bool:
    # Local calendar dates as published, not converted to a common zone.
    if departure is None or arrival is None:
        return False
    return arrival.date() != departure.date()


def booking_code(name=None, rng=None) -> str:
    compact = re.sub(r"\s+", "", name or "").upper()
    if compact:
        return compact[:BOOKING_CODE_LENGTH]
    rng = rng or random
    return "".join(rng.choice(BOOKING_CODE_ALPHABET) for _ in range(BOOKING_CODE_LENGTH))


def _instant(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _group_date(flight: EnrichedFlight, departure: Optional[datetime]) -> Optional[Date]:
    if departure is not None:
        return departure.date()
    if flight.date is not None:
        return flight.date
    if flight.status is not None and flight.status.scheduled_departure_date:
        try:
            return parse_date(flight.status.scheduled_departure_date)
        except ValueError:
            return None
    return None


def _assemble_flight(flight: EnrichedFlight, airport_name: Callable[[str], str]) -> AssembledFlight:
    status = flight.status
    departure = arrival = None
    origin = destination = None
    duration = None
    if status is not None:
        departure = parse_timestamp(status.departure_timestamp)
        arrival = parse_timestamp(status.arrival_timestamp)
        endpoints = extract_endpoints(status.legs, status.segments, status.flight_points)
        if endpoints is not None:
            origin, destination = endpoints.origin, endpoints.destination
        else:
            origin, destination = status.departure_airport, status.arrival_airport
        duration = status.duration

    return AssembledFlight(
        flight=flight,
        origin=origin,
        origin_name=(airport_name(origin) or "") if origin else "",
        destination=destination,
        destination_name=(airport_name(destination) or "") if destination else "",
        departure=departure,
        arrival=arrival,
        is_overnight=is_overnight(departure, arrival),
        duration=format_duration(duration),
    )


def _no_airport_name(code):
    return ""


def assemble(flights, airport_name=None) -> tuple:
    """Group displayable flights by local departure date.

    Groups come back in ascending date order and each group's flights in
    ascending departure order. Flights with neither a requested date nor a
    resolved status are dropped.
    """
    airport_name = airport_name or _no_airport_name
    buckets: dict[Date, list] = {}
    for index, flight in enumerate(flights):
        if flight.date is None and flight.status is None:
            continue
        assembled = _assemble_flight(flight, airport_name)
        group_date = _group_date(flight, assembled.departure)
        if group_date is None:
            continue
        buckets.setdefault(group_date, []).append((index, assembled))

    groups = []
    for group_date in sorted(buckets):
        entries = sorted(
            buckets[group_date],
            key=lambda item: (
                item[1].departure is None,
                _instant(item[1].departure) if item[1].departure else datetime.min,
                item[0],
            ),
        )
        groups.append(FlightGroup(date=group_date, flights=tuple(a for _, a in entries)))
    return tuple(groups)


def build_itinerary(flights, name=None, airport_name=None, rng=None) -> Itinerary:
    name = (name or "").strip() or None
    return Itinerary(
        name=name,
        booking_code=booking_code(name, rng=rng),
        groups=assemble(flights, airport_name=airport_name),
    )
