import requests

from flights.exceptions import FlightStatusError


class ProviderError(FlightStatusError):
    """Any failure raised by a flight status provider."""


class ProviderConfigError(ProviderError):
    """Credentials are missing. Raised before any network call and never retried."""

    default_message = "Internal server error: API configuration missing."


class ProviderHttpError(ProviderError):
    def __init__(self, status, title, detail=None):
        message = f"Amadeus API Error: {title}"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(message, status_code=status or 500)
        self.title = title
        self.detail = detail


class ProviderSdkError(ProviderError):
    def __init__(self, description, status_code=None):
        super().__init__(description, status_code=status_code)
        self.description = description


class UnknownProviderError(ProviderError):
    pass


def _response_body(exc):
    response = getattr(exc, "response", None)
    if response is None:
        return None, None
    try:
        body = response.json()
    except ValueError:
        body = None
    return getattr(response, "status_code", None), body if isinstance(body, dict) else None


def classify_provider_failure(exc):
    """Translate any exception raised while talking to the provider into a ProviderError.

    First applicable rule wins:
      1. a structured ``errors`` list in the HTTP body -> ProviderHttpError
      2. an SDK-style description (OAuth ``error_description`` or a transport failure) -> ProviderSdkError
      3. the exception's own message -> UnknownProviderError
      4. a fixed default -> UnknownProviderError
    """
    if isinstance(exc, ProviderError):
        return exc

    status, body = _response_body(exc)
    errors = (body or {}).get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        first = errors[0]
        title = first.get("title") or "Unknown error"
        return ProviderHttpError(status or first.get("status"), title, first.get("detail"))

    description = getattr(exc, "description", None)
    if not description and body:
        description = body.get("error_description")
    if not description and isinstance(exc, requests.RequestException):
        description = str(exc) or exc.__class__.__name__
    if description:
        return ProviderSdkError(str(description), status_code=status)

    message = str(exc)
    if message:
        return UnknownProviderError(message)

    return UnknownProviderError()


class FlightProvider:
    def lookup(self, query):
        """
        Returns the provider's raw flight records for one FlightQuery.
        """
        raise NotImplementedError
