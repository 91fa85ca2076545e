from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class FlightQuery:
    carrier_code: str
    flight_number: str
    scheduled_departure_date: date

    @property
    def date_string(self) -> str:
        return self.scheduled_departure_date.isoformat()

    @property
    def cache_key(self) -> str:
        # Literal fields: "DL"/"dl" and "100"/"0100" are distinct keys.
        return f"{self.carrier_code}-{self.flight_number}-{self.date_string}"
