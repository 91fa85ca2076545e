class FlightStatusError(Exception):
    """Base for every failure that is reported to API callers as ``{"error": message}``."""

    default_message = "Failed to fetch flight status."
    default_status_code = 500

    def __init__(self, message=None, status_code=None):
        self.message = message or self.default_message
        self.status_code = status_code or self.default_status_code
        super().__init__(self.message)


class InvalidQuery(FlightStatusError):
    default_message = "Invalid query parameters provided."
    default_status_code = 400

    def __init__(self, message=None, errors=None):
        super().__init__(message)
        self.errors = errors or {}


class FlightNotFound(FlightStatusError):
    default_message = "Flight not found for the given details."
    default_status_code = 404
