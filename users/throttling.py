"""
Brute-force protection for the login and setup endpoints.

Attempts are counted per client IP inside a sliding window.  Once the
count goes over the limit the client is blocked for a fixed period, and
every request during the block is refused with 429.  State lives in the
Django cache so all workers share it.
"""
import logging
import time

from django.conf import settings
from django.core.cache import cache
from rest_framework.throttling import BaseThrottle

logger = logging.getLogger(__name__)


def get_client_ip(request) -> str:
    """First ``X-Forwarded-For`` entry, else ``REMOTE_ADDR``."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.META.get("REMOTE_ADDR") or "unknown"


class BruteForceThrottle(BaseThrottle):
    scope = None
    rate_setting = None
    cache = cache

    def __init__(self):
        conf = getattr(settings, self.rate_setting)
        self.max_attempts = conf["max_attempts"]
        self.window = conf["window"]
        self.block = conf["block"]
        self._wait = None

    def _keys(self, ident):
        base = f"bruteforce:{self.scope}:{ident}"
        return f"{base}:attempts", f"{base}:blocked_until"

    def allow_request(self, request, view):
        now = time.time()
        ident = get_client_ip(request)
        attempts_key, blocked_key = self._keys(ident)

        blocked_until = self.cache.get(blocked_key)
        if blocked_until and blocked_until > now:
            logger.warning("Brute force blocked (%s) from %s on %s %s",
                           self.scope, ident, request.method, request.path)
            self._wait = blocked_until - now
            return False

        attempts = [t for t in self.cache.get(attempts_key, []) if now - t < self.window]
        attempts.append(now)
        self.cache.set(attempts_key, attempts, self.window)

        if len(attempts) > self.max_attempts:
            self.cache.set(blocked_key, now + self.block, self.block)
            logger.warning("Brute force detected (%s) from %s on %s %s",
                           self.scope, ident, request.method, request.path)
            self._wait = self.block
            return False
        return True

    def wait(self):
        return self._wait


class LoginThrottle(BruteForceThrottle):
    scope = "auth-login"
    rate_setting = "LOGIN_RATE_LIMIT"


class SetupThrottle(BruteForceThrottle):
    scope = "auth-setup"
    rate_setting = "SETUP_RATE_LIMIT"
