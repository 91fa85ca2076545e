import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from flights.exceptions import FlightNotFound, FlightStatusError
from flights.providers.base import classify_provider_failure
from flights.serializers import validate_query
from flights.services.cache import LookupCache
from flights.services.normalize import normalize_flight_statuses

logger = logging.getLogger(__name__)


class FlightStatusService:
    """Validate -> cache -> provider -> normalize -> cache write.

    ``provider_factory`` is called on the first cache miss (and again until it
    succeeds), so missing credentials surface per request rather than at startup.
    Concurrent misses on one key are not coalesced; the last write wins.
    """

    def __init__(self, provider_factory, cache=None, max_workers=4):
        self.cache = cache if cache is not None else LookupCache()
        self._provider_factory = provider_factory
        self._provider = None
        self._provider_lock = threading.Lock()
        self.max_workers = max(1, max_workers)

    def _get_provider(self):
        with self._provider_lock:
            if self._provider is None:
                self._provider = self._provider_factory()
            return self._provider

    def lookup(self, query):
        """Canonical statuses for an already validated FlightQuery."""
        key = query.cache_key
        entry = self.cache.get(key)
        if entry is not None:
            logger.info(
                "Cache hit for flight %s%s on %s", query.carrier_code, query.flight_number, query.date_string
            )
            return entry.value

        logger.debug("Cache miss for %s", key)
        provider = self._get_provider()
        raw_flights = provider.lookup(query)
        if not raw_flights:
            logger.info("No flights found for %s", key)
            raise FlightNotFound()

        statuses = normalize_flight_statuses(raw_flights)
        self.cache.put(key, statuses)
        return statuses

    def get_flight_status(self, raw_params):
        return self.lookup(validate_query(raw_params))

    def _lookup_or_error(self, query):
        try:
            return self.lookup(query), None
        except FlightStatusError as exc:
            return None, exc.message
        except Exception as exc:
            logger.exception("Unexpected failure looking up %s", query.cache_key)
            return None, classify_provider_failure(exc).message

    def lookup_many(self, queries):
        """Look up several queries concurrently.

        Returns ``(statuses, error_message)`` pairs in input order; one failure
        never prevents the others from resolving.
        """
        queries = list(queries)
        if not queries:
            return []
        workers = min(self.max_workers, len(queries))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(self._lookup_or_error, queries))
        failed = sum(1 for _, error in results if error)
        logger.info("Itinerary lookup finished: %d flights, %d failed", len(results), failed)
        return results
