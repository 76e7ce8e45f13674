"""
Day-over-day drop detection.

For every event and every platform of the site mapping that the event is
sent from, the number of events recorded yesterday is compared with the
day before.  A drop of at least ``drop_threshold`` percent creates an
`Alert`.

Checks run in batches of ``max_concurrency`` on a thread pool, sharing a
rate limiter with a 200 ms minimum gap between requests.  Worker threads
only talk to the analytics API; alerts are written from the calling
thread once a batch is done.  A failed check is logged and skipped.
"""
from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta

import requests
from django.utils import timezone

from common.http_client import create_rate_limiter
from events.models import Event
from .config import AlertSettings, load_alert_settings
from .matomo import MatomoError, build_event_label, get_event_count
from .models import Alert

logger = logging.getLogger(__name__)

RATE_LIMIT_INTERVAL = 0.2


class AlertCheckError(Exception):
    """The check cannot start (monitoring disabled or no API token)."""


def compute_drop_percent(yesterday: int, day_before: int) -> int | None:
    """Percentage drop rounded half up; None when there is nothing to compare."""
    if day_before <= 0:
        return None
    return math.floor((1 - yesterday / day_before) * 100 + 0.5)


def build_checks(events, site_mapping: dict) -> list[dict]:
    checks = []
    for event in events:
        listed = {str(p).lower() for p in event.platforms or []}
        for platform in site_mapping:
            if platform in listed:
                checks.append({
                    "event_id": event.pk,
                    "category": event.category.name,
                    "action": event.action,
                    "platform": platform,
                })
    return checks


def get_check_settings() -> AlertSettings:
    config = load_alert_settings()
    if not config.is_enabled:
        raise AlertCheckError("The alerts module is disabled. Enable it in the alert settings.")
    if not config.token:
        raise AlertCheckError("The analytics API token is not configured.")
    return config


def _fetch_counts(check: dict, config: AlertSettings, limiter, yesterday: date, day_before: date, fetch_count):
    label = build_event_label(check["category"], check["action"])
    site_id = config.site_mapping.get(check["platform"], 1)
    try:
        with limiter:
            current = fetch_count(config.api_url, config.token, site_id, label, yesterday)
            previous = fetch_count(config.api_url, config.token, site_id, label, day_before)
    except (requests.RequestException, MatomoError) as exc:
        logger.error("Failed to check event %s on %s: %s", check["event_id"], check["platform"], exc)
        return None
    except Exception:
        logger.exception("Unexpected error checking event %s on %s", check["event_id"], check["platform"])
        return None
    return current, previous


def run_drop_check(config: AlertSettings | None = None, today: date | None = None, fetch_count=None):
    """
    Run the check, yielding progress dicts.

    Yields ``started`` first, one ``progress`` per batch and ``completed``
    last.  Raises `AlertCheckError` before yielding anything when the check
    cannot run.
    """
    config = config or get_check_settings()
    fetch_count = fetch_count or get_event_count
    today = today or timezone.now().date()
    yesterday = today - timedelta(days=1)
    day_before = today - timedelta(days=2)

    events = list(Event.objects.select_related("category").order_by("id"))
    checks = build_checks(events, config.site_mapping)
    total = len(checks)
    batch_size = max(int(config.max_concurrency or 1), 1)
    limiter = create_rate_limiter(batch_size, RATE_LIMIT_INTERVAL)

    logger.info("Starting drop check: %s events, %s checks, threshold %s%%",
                len(events), total, config.drop_threshold)
    yield {"status": "started", "total": total, "completed": 0, "events_count": len(events)}

    alerts_created = 0
    completed = 0
    with ThreadPoolExecutor(max_workers=batch_size) as pool:
        for start in range(0, total, batch_size):
            batch = checks[start:start + batch_size]
            futures = [
                pool.submit(_fetch_counts, check, config, limiter, yesterday, day_before, fetch_count)
                for check in batch
            ]
            for check, future in zip(batch, futures):
                counts = future.result()
                if counts is None:
                    continue
                current, previous = counts
                drop = compute_drop_percent(current, previous)
                if drop is None or drop < config.drop_threshold:
                    continue
                Alert.objects.create(
                    event_id=check["event_id"],
                    platform=check["platform"],
                    event_category=check["category"],
                    event_action=check["action"],
                    yesterday_count=current,
                    day_before_count=previous,
                    drop_percent=drop,
                    checked_at=timezone.now(),
                )
                alerts_created += 1
                logger.warning("Event %s > %s dropped %s%% on %s (%s -> %s)",
                               check["category"], check["action"], drop, check["platform"], previous, current)

            completed += len(batch)
            yield {"status": "progress", "completed": completed, "total": total, "alerts_found": alerts_created}

    logger.info("Drop check finished: %s alerts created", alerts_created)
    yield {
        "status": "completed",
        "completed": total,
        "total": total,
        "alerts_created": alerts_created,
        "events_checked": len(events),
    }


def check_event_drops(**kwargs) -> dict:
    """Run the whole check and return the final ``completed`` summary."""
    summary = {}
    for summary in run_drop_check(**kwargs):
        pass
    return summary
