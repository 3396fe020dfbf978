"""
TOTP provider wrapper.

Code generation and verification are delegated to ``pyotp``. The wrapper
remembers the timestep of the last accepted code per secret so the same
code (or an older one) cannot be replayed inside its validity window.
"""
import hashlib
import io
import logging
import time
from typing import Optional

import pyotp
import qrcode
import qrcode.image.svg
from django.conf import settings
from django.core.cache import cache
from django.utils.crypto import get_random_string
from pyotp.utils import strings_equal

logger = logging.getLogger(__name__)


class QrCodeSvgImage(qrcode.image.svg.SvgPathFillImage):
    """Single-path SVG with a near-black foreground on white."""
    background = '#ffffff'
    QR_PATH_STYLE = {
        'fill': '#09090b',
        'fill-opacity': '1',
        'fill-rule': 'nonzero',
        'stroke': 'none',
    }


class TwoFactorAuthentication:
    """Generate and verify time-based one-time passwords."""

    cache_prefix = 'two_factor_authentication'
    interval = 30
    digits = 6

    def __init__(self, window: Optional[int] = None, cache_backend=None):
        self._window = window
        self.cache = cache_backend or cache

    @property
    def window(self) -> int:
        if self._window is not None:
            return self._window
        return getattr(settings, 'TWO_FACTOR_WINDOW', 1)

    def generate_secret_key(self) -> str:
        return pyotp.random_base32(length=32)

    def generate_recovery_code(self) -> str:
        return get_random_string(10)

    def get_qr_code_url(self, company: str, email: str, secret: str) -> str:
        return self._totp(secret).provisioning_uri(name=email, issuer_name=company)

    def render_qr_code_svg(self, url: str) -> str:
        """Render an otpauth URL as inline SVG markup."""
        image = qrcode.make(url, image_factory=QrCodeSvgImage, border=0)

        buffer = io.BytesIO()
        image.save(buffer)
        svg = buffer.getvalue().decode('utf-8')

        # Drop the XML declaration so the markup can be embedded in a page
        if svg.startswith('<?xml'):
            svg = svg[svg.find('>') + 1:]

        return svg.strip()

    def get_timestamp(self, for_time: Optional[float] = None) -> int:
        """Current TOTP timestep."""
        return int(self._now(for_time)) // self.interval

    def verify(self, secret: str, code: str, for_time: Optional[float] = None) -> bool:
        """
        Check a code against the secret.

        Returns ``False`` for malformed input, codes outside the window and
        codes no newer than the last one accepted for this secret.
        """
        if not secret or not code:
            return False

        cache_key = self._cache_key(secret)
        last_timestep = self.cache.get(cache_key)

        try:
            timestep = self._matching_timestep(secret, str(code).strip(), self._now(for_time))
        except (TypeError, ValueError) as e:
            logger.warning(f"Two factor verification failed: {type(e).__name__}")
            return False

        if timestep is None:
            return False

        if last_timestep is not None and timestep <= last_timestep:
            return False

        # add() is atomic, so two requests racing with one code cannot both claim it
        timeout = max(self.window, 1) * 60
        if not self.cache.add(f"{cache_key}:{timestep}", True, timeout=timeout):
            return False

        self.cache.set(cache_key, timestep, timeout=timeout)
        return True

    def get_current_otp(self, secret: str, for_time: Optional[float] = None) -> Optional[str]:
        try:
            return self._totp(secret).at(self._now(for_time))
        except (TypeError, ValueError):
            return None

    def _matching_timestep(self, secret: str, code: str, now: float) -> Optional[int]:
        totp = self._totp(secret)
        current = int(now) // self.interval

        for offset in range(-self.window, self.window + 1):
            if strings_equal(code, totp.at(now, counter_offset=offset)):
                return current + offset

        return None

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self.digits, interval=self.interval)

    def _cache_key(self, secret: str) -> str:
        return f"{self.cache_prefix}:{hashlib.sha256(secret.encode('utf-8')).hexdigest()}"

    @staticmethod
    def _now(for_time: Optional[float]) -> float:
        return time.time() if for_time is None else for_time


two_factor_authentication = TwoFactorAuthentication()
