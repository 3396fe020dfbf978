from django.core.cache import cache
from django.test import SimpleTestCase

from core.throttling import RateLimiter


class RateLimiterTest(SimpleTestCase):
    """Tests for the cache backed attempt counter."""

    def setUp(self):
        cache.clear()
        self.limiter = RateLimiter()
        self.key = self.limiter.make_key('login_attempt', 'ada@example.com', '127.0.0.1')

    def test_make_key_is_ascii(self):
        self.assertEqual(self.limiter.make_key('login_attempt', 'zoë@example.com'), 'login_attempt:zoe@example.com')

    def test_hit_counts_attempts(self):
        self.assertEqual(self.limiter.hit(self.key), 1)
        self.assertEqual(self.limiter.hit(self.key), 2)
        self.assertEqual(self.limiter.attempts(self.key), 2)

    def test_too_many_attempts(self):
        for _ in range(4):
            self.limiter.hit(self.key)
        self.assertFalse(self.limiter.too_many_attempts(self.key, 5))

        self.limiter.hit(self.key)
        self.assertTrue(self.limiter.too_many_attempts(self.key, 5))
        self.assertGreater(self.limiter.available_in(self.key), 0)
        self.assertLessEqual(self.limiter.available_in(self.key), 60)

    def test_clear(self):
        for _ in range(5):
            self.limiter.hit(self.key)

        self.limiter.clear(self.key)

        self.assertEqual(self.limiter.attempts(self.key), 0)
        self.assertFalse(self.limiter.too_many_attempts(self.key, 5))
        self.assertEqual(self.limiter.available_in(self.key), 0)
