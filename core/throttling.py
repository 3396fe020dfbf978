"""
Rate limiting.

``RateLimiter`` counts failed attempts against an arbitrary key (for example
an email/IP pair) so a successful attempt can reset the count. The DRF
throttle classes limit how often an endpoint can be hit at all.
"""

import math
import time
import unicodedata

from django.core.cache import cache
from rest_framework.throttling import SimpleRateThrottle


class RateLimiter:
    """
    Cache-backed attempt counter with a decay window.

    The first hit opens a window of ``decay_seconds``; once
    ``max_attempts`` hits land inside the window the key is locked until the
    window closes.
    """

    def __init__(self, cache_backend=None):
        self.cache = cache_backend or cache

    @staticmethod
    def make_key(*parts) -> str:
        """Build an ASCII cache key from its parts."""
        key = ':'.join(str(part) for part in parts)
        return unicodedata.normalize('NFKD', key).encode('ascii', 'ignore').decode('ascii')

    def _timer_key(self, key: str) -> str:
        return f"{key}:timer"

    def hit(self, key: str, decay_seconds: int = 60) -> int:
        """Record an attempt and return the number of attempts in the window."""
        self.cache.add(self._timer_key(key), time.time() + decay_seconds, decay_seconds)

        self.cache.add(key, 0, decay_seconds)
        try:
            return self.cache.incr(key)
        except ValueError:
            # The counter expired between add() and incr()
            self.cache.set(key, 1, decay_seconds)
            return 1

    def attempts(self, key: str) -> int:
        return self.cache.get(key, 0)

    def too_many_attempts(self, key: str, max_attempts: int) -> bool:
        if self.attempts(key) >= max_attempts:
            if self.cache.get(self._timer_key(key)) is not None:
                return True

            self.reset_attempts(key)

        return False

    def available_in(self, key: str) -> int:
        """Seconds until the key unlocks."""
        available_at = self.cache.get(self._timer_key(key))
        if available_at is None:
            return 0
        return max(0, math.ceil(available_at - time.time()))

    def reset_attempts(self, key: str):
        self.cache.delete(key)

    def clear(self, key: str):
        self.cache.delete(key)
        self.cache.delete(self._timer_key(key))


rate_limiter = RateLimiter()


class VerificationThrottle(SimpleRateThrottle):
    """Limit verification email requests and link visits per user."""
    scope = 'verification'

    def get_cache_key(self, request, view):
        if request.user and request.user.is_authenticated:
            ident = request.user.pk
        else:
            ident = self.get_ident(request)

        return self.cache_format % {'scope': self.scope, 'ident': ident}


class PasswordResetThrottle(SimpleRateThrottle):
    """Limit password reset requests per client address."""
    scope = 'password_reset'

    def get_cache_key(self, request, view):
        return self.cache_format % {'scope': self.scope, 'ident': self.get_ident(request)}
