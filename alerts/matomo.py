"""
Client for the Matomo reporting API.

Only ``Events.getCategory`` is needed: the number of events sent for one
``"<category> > @<action>"`` label on one site and day.
"""
from __future__ import annotations

import logging
from datetime import date

import requests
from django.conf import settings

from common.http_client import DEFAULT_TIMEOUT, fetch_with_timeout

logger = logging.getLogger(__name__)


class MatomoError(Exception):
    pass


def build_event_label(category: str, action: str) -> str:
    return f"{category} > @{action}"


def build_request_url(api_url: str, token: str, site_id: int, label: str, day: date) -> str:
    params = {
        "module": "API",
        "format": "JSON",
        "idSite": site_id,
        "period": "day",
        "date": day.isoformat(),
        "method": "Events.getCategory",
        "label": label,
        "filter_limit": 100,
        "token_auth": token,
    }
    return requests.Request("GET", api_url, params=params).prepare().url


def _as_count(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError) as exc:
        raise MatomoError(f"Unexpected nb_events value: {value!r}") from exc


def parse_event_count(data) -> int:
    """``nb_events`` of the first row (list payload) or of the object itself."""
    if isinstance(data, list):
        row = data[0] if data else {}
        return _as_count((row or {}).get("nb_events")) if isinstance(row, dict) else 0
    if isinstance(data, dict):
        if data.get("result") == "error":
            raise MatomoError(data.get("message") or "Matomo returned an error")
        return _as_count(data.get("nb_events"))
    return 0


def get_event_count(api_url: str, token: str, site_id: int, label: str, day: date,
                    timeout: float | None = None) -> int:
    if timeout is None:
        timeout = getattr(settings, "ANALYTICS_HTTP_TIMEOUT", DEFAULT_TIMEOUT)
    url = build_request_url(api_url, token, site_id, label, day)
    response = fetch_with_timeout(url, timeout=timeout)
    if not response.ok:
        raise MatomoError(f"Matomo responded with HTTP {response.status_code}")
    try:
        data = response.json()
    except ValueError as exc:
        raise MatomoError("Matomo returned invalid JSON") from exc
    count = parse_event_count(data)
    logger.debug("Matomo site=%s date=%s label=%r -> %s events", site_id, day, label, count)
    return count
