"""
Account services.

Views validate input with serializers and hand the resulting data objects to
these services, which own every state change.
"""
import hashlib
import logging
import time
import uuid
from typing import Optional

from django.conf import settings
from django.contrib.auth import login as auth_login
from django.contrib.auth import logout as auth_logout
from django.contrib.auth import update_session_auth_hash
from django.contrib.auth.tokens import default_token_generator
from django.core.cache import cache
from django.core.files.base import ContentFile
from django.core.signing import BadSignature, TimestampSigner
from django.db import transaction
from django.urls import reverse
from django.utils import timezone
from django.utils.crypto import constant_time_compare
from django.utils.http import urlencode

from core.throttling import rate_limiter
from images import ImageProcessor
from localisation.services import localisation
from two_factor.services import two_factor_authentication

from .data import RegisterData, ResetPasswordData, UpdateAccountData, UpdatePreferencesData
from .emails import send_password_reset_email, send_verification_email
from .exceptions import TwoFactorSetupError
from .models import User

logger = logging.getLogger(__name__)


def get_client_ip(request) -> str:
    return request.META.get('REMOTE_ADDR', '')


class EmailVerificationService:
    """Signed, expiring email verification links."""

    salt = 'accounts.email_verification'

    @property
    def signer(self) -> TimestampSigner:
        return TimestampSigner(salt=self.salt)

    @staticmethod
    def _email_digest(user: User) -> str:
        return hashlib.sha1(user.email.encode('utf-8')).hexdigest()

    def make_hash(self, user: User) -> str:
        return self.signer.sign(self._email_digest(user))

    def verification_url(self, request, user: User) -> str:
        path = reverse('verification_verify', kwargs={'id': user.pk, 'hash': self.make_hash(user)})
        return request.build_absolute_uri(path)

    def send(self, request, user: User) -> bool:
        """Send a verification link unless the user is already verified."""
        if user.has_verified_email():
            return False

        send_verification_email(user, self.verification_url(request, user))
        return True

    def verify(self, user: User, user_id, signed_hash: str) -> bool:
        """
        Mark the user as verified when the link belongs to them.

        Expired or tampered links and links for another user are rejected.
        """
        if str(user.pk) != str(user_id):
            return False

        try:
            digest = self.signer.unsign(signed_hash, max_age=settings.VERIFICATION_LINK_TIMEOUT)
        except BadSignature:
            logger.warning(f"Invalid or expired verification link for user {user.pk}")
            return False

        if not constant_time_compare(digest, self._email_digest(user)):
            return False

        if not user.has_verified_email():
            user.mark_email_as_verified()
            logger.info(f"Email verified for user {user.pk}")

        return True


class AuthenticationService:
    """Session login, two factor challenge and password confirmation."""

    max_login_attempts = 5
    decay_seconds = 60

    SESSION_LOGIN_ID = 'login.id'
    SESSION_LOGIN_REMEMBER = 'login.remember'
    SESSION_PASSWORD_CONFIRMED_AT = 'auth.password_confirmed_at'

    def throttle_key(self, request, email: str, prefix: str = 'login_attempt') -> str:
        return rate_limiter.make_key(prefix, (email or '').lower(), get_client_ip(request))

    def login(self, request, user: User, remember: bool = False):
        auth_login(request, user, backend='django.contrib.auth.backends.ModelBackend')

        if not remember:
            # Expire the session when the browser closes
            request.session.set_expiry(0)

        logger.info(f"User {user.pk} logged in")

    def start_two_factor_challenge(self, request, user: User, remember: bool = False):
        request.session[self.SESSION_LOGIN_ID] = str(user.pk)
        request.session[self.SESSION_LOGIN_REMEMBER] = bool(remember)
        logger.info(f"Two factor challenge started for user {user.pk}")

    def challenged_user(self, request) -> Optional[User]:
        user_id = request.session.get(self.SESSION_LOGIN_ID)
        if not user_id:
            return None

        try:
            return User.objects.get(pk=user_id, is_active=True)
        except (User.DoesNotExist, ValueError):
            return None

    def complete_two_factor_challenge(self, request, user: User, recovery_code: Optional[str] = None):
        if recovery_code:
            user.replace_recovery_code(recovery_code)

        remember = request.session.pop(self.SESSION_LOGIN_REMEMBER, False)
        request.session.pop(self.SESSION_LOGIN_ID, None)

        self.login(request, user, remember)

    def logout(self, request):
        user_id = getattr(request.user, 'pk', None)
        auth_logout(request)
        logger.info(f"User {user_id} logged out")

    def confirm_password(self, request):
        request.session[self.SESSION_PASSWORD_CONFIRMED_AT] = int(time.time())

    def password_recently_confirmed(self, request) -> bool:
        confirmed_at = request.session.get(self.SESSION_PASSWORD_CONFIRMED_AT)
        if not confirmed_at:
            return False
        return time.time() - confirmed_at < settings.PASSWORD_CONFIRMATION_TIMEOUT


class RegistrationService:

    def register(self, request, data: RegisterData) -> User:
        language = (
            localisation.resolve_supported_locale(data.language)
            if data.language else localisation.get_default_locale()
        )

        with transaction.atomic():
            user = User.objects.create_user(
                email=data.email,
                password=data.password,
                name=data.name,
                language=language,
            )

        logger.info(f"User {user.pk} registered")

        auth_service.login(request, user)
        email_verification_service.send(request, user)
        return user


class PasswordResetService:
    """Password reset links built on Django's token generator."""

    throttle_prefix = 'password_reset_throttle'

    def _throttle_key(self, user: User) -> str:
        return f"{self.throttle_prefix}:{user.pk}"

    def reset_url(self, user: User, token: str) -> str:
        query = urlencode({'email': user.email})
        return f"{settings.FRONTEND_URL.rstrip('/')}/reset-password/{token}?{query}"

    def send_reset_link(self, user: User) -> bool:
        """Email a reset link. Returns False while the user is throttled."""
        if not cache.add(self._throttle_key(user), True, settings.PASSWORD_RESET_THROTTLE):
            logger.warning(f"Password reset throttled for user {user.pk}")
            return False

        token = default_token_generator.make_token(user)
        send_password_reset_email(user, self.reset_url(user, token))
        logger.info(f"Password reset link sent to user {user.pk}")
        return True

    def find_user(self, email: str) -> Optional[User]:
        return User.objects.filter(email__iexact=email, is_active=True).first()

    def check_token(self, user: User, token: str) -> bool:
        return default_token_generator.check_token(user, token)

    def reset(self, user: User, data: ResetPasswordData) -> User:
        user.set_password(data.password)
        user.save(update_fields=['password', 'updated_at'])
        cache.delete(self._throttle_key(user))
        logger.info(f"Password reset for user {user.pk}")
        return user


class TwoFactorService:
    """Enable, confirm and disable TOTP for a user."""

    def enable(self, user: User) -> dict:
        """
        Generate a new secret and recovery codes.

        Two factor stays unconfirmed until ``confirm`` is called. Nothing is
        saved if the credentials cannot be generated.
        """
        try:
            secret = two_factor_authentication.generate_secret_key()
            recovery_codes = [
                two_factor_authentication.generate_recovery_code()
                for _ in range(settings.TWO_FACTOR_RECOVERY_CODE_COUNT)
            ]
            qr_code = two_factor_authentication.render_qr_code_svg(
                two_factor_authentication.get_qr_code_url(settings.APP_NAME, user.email, secret)
            )
        except Exception as e:
            logger.exception(f"Two factor setup failed for user {user.pk}")
            raise TwoFactorSetupError(str(e)) from e

        user.two_factor_secret = secret
        user.two_factor_recovery_codes = recovery_codes
        user.two_factor_confirmed_at = None
        user.save(update_fields=[
            'two_factor_secret', 'two_factor_recovery_codes', 'two_factor_confirmed_at', 'updated_at',
        ])

        logger.info(f"Two factor enabled for user {user.pk}")
        return {'qr_code': qr_code, 'secret': secret}

    def confirm(self, user: User):
        user.two_factor_confirmed_at = timezone.now()
        user.save(update_fields=['two_factor_confirmed_at', 'updated_at'])
        logger.info(f"Two factor confirmed for user {user.pk}")

    def disable(self, user: User):
        user.two_factor_secret = None
        user.two_factor_recovery_codes = None
        user.two_factor_confirmed_at = None
        user.save(update_fields=[
            'two_factor_secret', 'two_factor_recovery_codes', 'two_factor_confirmed_at', 'updated_at',
        ])
        logger.info(f"Two factor disabled for user {user.pk}")


class AccountService:
    """Profile, password, preference and avatar updates."""

    def update_account(self, request, user: User, data: UpdateAccountData) -> User:
        email_changed = data.email != user.email

        user.name = data.name
        user.email = data.email
        if email_changed:
            user.email_verified_at = None
        user.save(update_fields=['name', 'email', 'email_verified_at', 'updated_at'])

        if email_changed:
            logger.info(f"User {user.pk} changed email address")
            email_verification_service.send(request, user)

        return user

    def update_password(self, request, user: User, password: str):
        user.set_password(password)
        user.save(update_fields=['password', 'updated_at'])
        update_session_auth_hash(request, user)
        logger.info(f"User {user.pk} changed password")

    def update_preferences(self, user: User, data: UpdatePreferencesData) -> User:
        user.language = data.language
        user.save(update_fields=['language', 'updated_at'])
        return user

    def update_avatar(self, user: User, upload) -> User:
        """
        Re-encode the upload as a square WebP and store it.

        Raises ``ImageProcessorError`` when the upload cannot be processed.
        The previous avatar is only removed once the new one is stored.
        """
        size = settings.AVATAR_SIZE
        content = ImageProcessor().read(upload).cover(size, size).to_webp().optimize().save()

        previous = user.avatar.name if user.avatar else None
        user.avatar.save(f'{uuid.uuid4().hex}.webp', ContentFile(content), save=False)
        user.save(update_fields=['avatar', 'updated_at'])

        if previous:
            user.avatar.storage.delete(previous)

        logger.info(f"Avatar updated for user {user.pk}")
        return user

    def delete_avatar(self, user: User) -> User:
        user.delete_avatar()
        return user

    def delete_account(self, request, user: User):
        auth_service.logout(request)

        user_id = user.pk
        user.delete_avatar(save=False)
        user.delete()
        logger.info(f"User {user_id} deleted their account")


email_verification_service = EmailVerificationService()
auth_service = AuthenticationService()
registration_service = RegistrationService()
password_reset_service = PasswordResetService()
two_factor_service = TwoFactorService()
account_service = AccountService()
