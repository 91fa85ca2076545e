from __future__ import annotations

import logging

import requests
from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

DATASET_CACHE_KEY = "airports:names:dataset"
DATASET_CACHE_TTL = 60 * 60 * 24
# A failed download is remembered as an empty dataset for this long.
DATASET_FAILURE_TTL = 60 * 5


def _index_airports(payload) -> dict[str, str]:
    if isinstance(payload, dict):
        items = [value for value in payload.values() if isinstance(value, dict)]
    elif isinstance(payload, list):
        items = [item for item in payload if isinstance(item, dict)]
    else:
        items = []

    names = {}
    for item in items:
        code = str(item.get("iata") or item.get("iataCode") or "").strip().upper()
        name = item.get("name") or item.get("airportName")
        if not code or not name:
            continue
        # Some datasets flag closed airports with status != 1.
        if "status" in item and item.get("status") != 1:
            continue
        names.setdefault(code, name)
    return names


def _load_airport_names() -> dict[str, str]:
    cached = cache.get(DATASET_CACHE_KEY)
    if isinstance(cached, dict):
        return cached

    url = getattr(settings, "AIRPORTS_DATA_URL", None)
    if not url:
        return {}

    response = requests.get(url, timeout=15)
    response.raise_for_status()
    names = _index_airports(response.json())

    cache.set(DATASET_CACHE_KEY, names, DATASET_CACHE_TTL)
    return names


def get_airport_name(iata_code: str | None) -> str:
    """Airport name for an IATA code, or "" when unknown. Display only."""
    if not iata_code:
        return ""
    try:
        names = _load_airport_names()
    except (requests.RequestException, ValueError):
        logger.warning("Airport dataset could not be loaded.", exc_info=True)
        cache.set(DATASET_CACHE_KEY, {}, DATASET_FAILURE_TTL)
        return ""
    return str(names.get(str(iata_code).strip().upper()) or "")
