import time
from unittest.mock import patch

from django.core.cache import cache
from django.test import TestCase

import pyotp

from two_factor.services import TwoFactorAuthentication


class TwoFactorAuthenticationTest(TestCase):
    """Tests for the TOTP provider wrapper."""

    def setUp(self):
        cache.clear()
        self.provider = TwoFactorAuthentication(window=1)
        self.secret = self.provider.generate_secret_key()

    def test_generate_secret_key_is_base32(self):
        self.assertEqual(len(self.secret), 32)
        self.assertTrue(set(self.secret) <= set('ABCDEFGHIJKLMNOPQRSTUVWXYZ234567'))
        self.assertNotEqual(self.secret, self.provider.generate_secret_key())

    def test_generate_recovery_code(self):
        code = self.provider.generate_recovery_code()
        self.assertEqual(len(code), 10)
        self.assertTrue(code.isalnum())

    def test_qr_code_url(self):
        url = self.provider.get_qr_code_url('Portal', 'ada@example.com', self.secret)
        self.assertTrue(url.startswith('otpauth://totp/'))
        self.assertIn('issuer=Portal', url)
        self.assertIn(f'secret={self.secret}', url)

    def test_render_qr_code_svg(self):
        url = self.provider.get_qr_code_url('Portal', 'ada@example.com', self.secret)
        svg = self.provider.render_qr_code_svg(url)
        self.assertTrue(svg.startswith('<svg'))
        self.assertNotIn('<?xml', svg)
        self.assertIn('#09090b', svg)

    def test_verify_current_code(self):
        code = pyotp.TOTP(self.secret).now()
        self.assertTrue(self.provider.verify(self.secret, code))

    def test_verify_rejects_replay(self):
        now = time.time()
        code = self.provider.get_current_otp(self.secret, for_time=now)
        self.assertTrue(self.provider.verify(self.secret, code, for_time=now))
        self.assertFalse(self.provider.verify(self.secret, code, for_time=now))

    def test_verify_rejects_concurrent_use_of_one_code(self):
        now = time.time()
        code = self.provider.get_current_otp(self.secret, for_time=now)
        self.assertTrue(self.provider.verify(self.secret, code, for_time=now))

        # A second request that read the cache before the first one wrote it
        with patch.object(self.provider.cache, 'get', return_value=None):
            self.assertFalse(self.provider.verify(self.secret, code, for_time=now))

    def test_verify_rejects_older_code_after_newer(self):
        now = time.time()
        previous = self.provider.get_current_otp(self.secret, for_time=now - 30)
        current = self.provider.get_current_otp(self.secret, for_time=now)
        self.assertTrue(self.provider.verify(self.secret, current, for_time=now))
        self.assertFalse(self.provider.verify(self.secret, previous, for_time=now))

    def test_verify_accepts_code_inside_window(self):
        now = time.time()
        previous = self.provider.get_current_otp(self.secret, for_time=now - 30)
        self.assertTrue(self.provider.verify(self.secret, previous, for_time=now))

    def test_verify_rejects_code_outside_window(self):
        now = time.time()
        stale = self.provider.get_current_otp(self.secret, for_time=now - 120)
        current = self.provider.get_current_otp(self.secret, for_time=now)
        if stale != current:
            self.assertFalse(self.provider.verify(self.secret, stale, for_time=now))

    def test_verify_rejects_wrong_code(self):
        current = self.provider.get_current_otp(self.secret)
        wrong = '000000' if current != '000000' else '111111'
        self.assertFalse(self.provider.verify(self.secret, wrong))

    def test_verify_handles_bad_input(self):
        self.assertFalse(self.provider.verify('', '123456'))
        self.assertFalse(self.provider.verify(self.secret, ''))
        self.assertFalse(self.provider.verify('not base32!', '123456'))

    def test_get_timestamp(self):
        self.assertEqual(self.provider.get_timestamp(for_time=90), 3)
