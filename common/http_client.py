"""
Outbound HTTP client used for calls to the external analytics API.

Wraps ``requests`` with a timeout, a retry policy for transient failures
and a concurrency/interval rate limiter.  Every attempt is recorded in an
in-memory ring buffer (``http_stats``) that backs the HTTP logs endpoints.
The buffer is per process; a worker restart starts it empty.
"""
from __future__ import annotations

import itertools
import logging
import re
import threading
import time
from collections import deque
from datetime import datetime, timezone

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
MAX_RETRIES = 3
INITIAL_BACKOFF = 1.0
RETRYABLE_STATUSES = {429, 502, 503, 504}

STATUS_SUCCESS = "success"
STATUS_TIMEOUT = "timeout"
STATUS_ERROR = "error"
STATUS_RETRY = "retry"

_TOKEN_RE = re.compile(r"(token_auth=)[^&]+")


def redact_url(url: str) -> str:
    """Hide API tokens before a URL is logged or stored."""
    return _TOKEN_RE.sub(r"\1***", url)


class RateLimiter:
    """Caps concurrent requests and enforces a minimum gap between starts."""

    def __init__(self, max_concurrent: int = 10, min_interval: float = 0.1):
        self.max_concurrent = max_concurrent
        self.min_interval = min_interval
        self.active_requests = 0
        self.queue_length = 0
        self._last_request_time = 0.0
        self._cond = threading.Condition()

    def acquire(self) -> None:
        with self._cond:
            self.queue_length += 1
            try:
                while True:
                    now = time.monotonic()
                    since_last = now - self._last_request_time
                    if self.active_requests < self.max_concurrent and since_last >= self.min_interval:
                        self.active_requests += 1
                        self._last_request_time = now
                        return
                    if self.active_requests < self.max_concurrent:
                        self._cond.wait(timeout=max(self.min_interval - since_last, 0.05))
                    else:
                        self._cond.wait()
            finally:
                self.queue_length -= 1

    def release(self) -> None:
        with self._cond:
            self.active_requests = max(self.active_requests - 1, 0)
            self._cond.notify_all()

    def status(self) -> dict:
        return {"active_requests": self.active_requests, "queue_length": self.queue_length}

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class HttpStats:
    """Thread-safe ring buffer of outbound request attempts."""

    def __init__(self, max_entries: int = 1000):
        self._entries: deque[dict] = deque(maxlen=max_entries)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def record(
        self,
        url: str,
        method: str,
        status: str,
        duration_ms: float,
        status_code: int | None = None,
        error_message: str | None = None,
        retry_count: int = 0,
    ) -> dict:
        entry = {
            "id": next(self._ids),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "url": redact_url(url),
            "method": method,
            "status": status,
            "status_code": status_code,
            "duration_ms": round(duration_ms),
            "error_message": error_message,
            "retry_count": retry_count,
        }
        with self._lock:
            self._entries.append(entry)
        return entry

    def get_logs(self) -> list[dict]:
        """All entries, newest first."""
        with self._lock:
            return list(reversed(self._entries))

    def get_stats(self) -> dict:
        with self._lock:
            entries = list(self._entries)
        total = len(entries)
        counts = {STATUS_SUCCESS: 0, STATUS_TIMEOUT: 0, STATUS_ERROR: 0, STATUS_RETRY: 0}
        for entry in entries:
            counts[entry["status"]] = counts.get(entry["status"], 0) + 1
        avg_duration = round(sum(e["duration_ms"] for e in entries) / total) if total else 0
        success_rate = round(counts[STATUS_SUCCESS] / total * 100, 1) if total else 0
        return {
            "total": total,
            **counts,
            "avg_duration": avg_duration,
            "success_rate": success_rate,
        }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


http_stats = HttpStats(getattr(settings, "HTTP_LOG_MAX_ENTRIES", 1000))
global_rate_limiter = RateLimiter(10, 0.1)


def get_global_rate_limiter_status() -> dict:
    return global_rate_limiter.status()


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000


def fetch_with_timeout(url: str, method: str = "GET", timeout: float | None = None,
                       retry_count: int = 0, **kwargs) -> requests.Response:
    """Perform a single request and record it in ``http_stats``."""
    timeout = DEFAULT_TIMEOUT if timeout is None else timeout
    started = time.monotonic()
    try:
        response = requests.request(method, url, timeout=timeout, **kwargs)
    except requests.Timeout as exc:
        http_stats.record(url, method, STATUS_TIMEOUT, _elapsed_ms(started),
                          error_message=str(exc), retry_count=retry_count)
        logger.warning("HTTP %s %s timed out after %ss", method, redact_url(url), timeout)
        raise
    except requests.RequestException as exc:
        http_stats.record(url, method, STATUS_ERROR, _elapsed_ms(started),
                          error_message=str(exc), retry_count=retry_count)
        logger.warning("HTTP %s %s failed: %s", method, redact_url(url), exc)
        raise

    if response.status_code in RETRYABLE_STATUSES:
        status = STATUS_RETRY
    elif response.ok:
        status = STATUS_SUCCESS
    else:
        status = STATUS_ERROR
    http_stats.record(url, method, status, _elapsed_ms(started),
                      status_code=response.status_code, retry_count=retry_count)
    logger.info("HTTP %s %s -> %s", method, redact_url(url), response.status_code)
    return response


def _is_retryable_error(exc: Exception) -> bool:
    # A timed-out request is not retried; refused or reset connections are.
    if isinstance(exc, requests.Timeout):
        return False
    return isinstance(exc, requests.ConnectionError)


def _retry_after_seconds(response: requests.Response, fallback: float) -> float:
    value = response.headers.get("Retry-After")
    if value and value.isdigit():
        return float(value)
    return fallback


def fetch_with_retry(url: str, method: str = "GET", max_retries: int = MAX_RETRIES,
                     **kwargs) -> requests.Response:
    """Retry transient failures with exponential backoff."""
    backoff = INITIAL_BACKOFF
    for attempt in range(max_retries + 1):
        try:
            response = fetch_with_timeout(url, method=method, retry_count=attempt, **kwargs)
        except requests.RequestException as exc:
            if not _is_retryable_error(exc) or attempt >= max_retries:
                raise
            time.sleep(backoff)
            backoff *= 2
            continue

        if response.status_code in RETRYABLE_STATUSES and attempt < max_retries:
            time.sleep(_retry_after_seconds(response, backoff))
            backoff *= 2
            continue
        return response
    raise RuntimeError("Max retries exceeded")


def fetch_with_rate_limit(url: str, method: str = "GET", rate_limiter: RateLimiter | None = None,
                          **kwargs) -> requests.Response:
    limiter = rate_limiter or global_rate_limiter
    with limiter:
        return fetch_with_retry(url, method=method, **kwargs)


def create_rate_limiter(max_concurrent: int, min_interval: float = 0.1) -> RateLimiter:
    return RateLimiter(max_concurrent, min_interval)
