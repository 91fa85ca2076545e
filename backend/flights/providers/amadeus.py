import logging
import threading
import time

import requests
from django.conf import settings

from flights.providers.base import FlightProvider, ProviderConfigError, classify_provider_failure

logger = logging.getLogger(__name__)

AMADEUS_HOSTS = {
    "test": "https://test.api.amadeus.com",
    "production": "https://api.amadeus.com",
}

TOKEN_PATH = "/v1/security/oauth2/token"
SCHEDULE_PATH = "/v2/schedule/flights"

# Refresh the access token slightly before the provider expires it.
TOKEN_EXPIRY_MARGIN = 10


def _base_url(hostname):
    value = (hostname or "test").strip().lower()
    if value.startswith("http://") or value.startswith("https://"):
        return value.rstrip("/")
    return AMADEUS_HOSTS.get(value, AMADEUS_HOSTS["test"])


class AmadeusProvider(FlightProvider):
    """On-Demand Flight Status (schedule) lookups against the Amadeus self-service API.

    One attempt per lookup, no retries. Every failure is re-raised as a classified
    ProviderError so callers only ever see the stable error taxonomy.
    """

    def __init__(self, client_id=None, client_secret=None, hostname=None, timeout=None, session=None, clock=None):
        self.client_id = client_id if client_id is not None else getattr(settings, "AMADEUS_CLIENT_ID", None)
        self.client_secret = (
            client_secret if client_secret is not None else getattr(settings, "AMADEUS_CLIENT_SECRET", None)
        )
        if not self.client_id or not self.client_secret:
            logger.error("Amadeus API credentials are not set in environment variables.")
            raise ProviderConfigError()

        self.base_url = _base_url(hostname or getattr(settings, "AMADEUS_HOSTNAME", "test"))
        self.timeout = timeout or getattr(settings, "FLIGHT_PROVIDER_TIMEOUT", 15)
        self.session = session or requests.Session()
        self._clock = clock or time.monotonic
        self._token = None
        self._token_expires_at = 0.0
        self._token_lock = threading.Lock()

    def _fetch_token(self):
        response = self.session.post(
            f"{self.base_url}{TOKEN_PATH}",
            data={
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        token = payload.get("access_token")
        if not token:
            raise ValueError("Amadeus token response did not include an access token.")
        expires_in = payload.get("expires_in") or 0
        return token, float(expires_in)

    def _access_token(self):
        with self._token_lock:
            now = self._clock()
            if self._token and now < self._token_expires_at:
                return self._token
            token, expires_in = self._fetch_token()
            self._token = token
            self._token_expires_at = now + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
            logger.info("Obtained Amadeus access token (expires in %ss).", int(expires_in))
            return token

    def lookup(self, query):
        logger.info(
            "Fetching flight status for %s%s on %s",
            query.carrier_code,
            query.flight_number,
            query.date_string,
        )
        try:
            token = self._access_token()
            response = self.session.get(
                f"{self.base_url}{SCHEDULE_PATH}",
                params={
                    "carrierCode": query.carrier_code,
                    "flightNumber": query.flight_number,
                    "scheduledDepartureDate": query.date_string,
                },
                headers={"Accept": "application/json", "Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except Exception as exc:
            error = classify_provider_failure(exc)
            logger.warning(
                "Amadeus API call failed: %s (status=%s)",
                error.message,
                error.status_code,
                exc_info=not isinstance(exc, requests.HTTPError),
            )
            raise error from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        return [item for item in data or [] if isinstance(item, dict)]
