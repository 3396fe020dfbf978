"""
User model for the account portal.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone

from core.encryption import EncryptedJSONField, EncryptedTextField
from core.models import TimestampedModel, UUIDModel
from two_factor.services import two_factor_authentication

logger = logging.getLogger(__name__)


class UserManager(BaseUserManager):
    """Manager creating users identified by a lowercase email address."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email address must be set')

        user = self.model(email=email.strip().lower(), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('email_verified_at', timezone.now())

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self._create_user(email, password, **extra_fields)

    def prunable(self):
        """Users who never verified their email within a day of signing up."""
        return self.filter(
            email_verified_at__isnull=True,
            created_at__lte=timezone.now() - timedelta(days=1),
        )


class User(AbstractBaseUser, PermissionsMixin, UUIDModel, TimestampedModel):
    """
    Portal user.

    Two factor secrets and recovery codes are encrypted at rest. Two factor
    authentication only counts as enabled once the secret has been confirmed
    with a valid code.
    """

    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=255, unique=True)
    language = models.CharField(max_length=10, default='en')
    avatar = models.ImageField(upload_to='avatars/', null=True, blank=True)
    email_verified_at = models.DateTimeField(null=True, blank=True)

    two_factor_secret = EncryptedTextField(null=True, blank=True)
    two_factor_recovery_codes = EncryptedJSONField(null=True, blank=True)
    two_factor_confirmed_at = models.DateTimeField(null=True, blank=True)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    objects = UserManager()

    EMAIL_FIELD = 'email'
    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        db_table = 'users'
        ordering = ['name']

    def __str__(self):
        return self.email

    @property
    def avatar_url(self):
        return self.avatar.url if self.avatar else None

    def has_verified_email(self) -> bool:
        return self.email_verified_at is not None

    def mark_email_as_verified(self) -> bool:
        self.email_verified_at = timezone.now()
        self.save(update_fields=['email_verified_at', 'updated_at'])
        return True

    def has_two_factor_enabled(self) -> bool:
        return bool(self.two_factor_secret) and self.two_factor_confirmed_at is not None

    def verify_two_factor_code(self, code: str) -> bool:
        if not self.two_factor_secret:
            return False
        return two_factor_authentication.verify(self.two_factor_secret, code)

    def verify_two_factor_recovery_code(self, code: str) -> bool:
        return bool(code) and code in (self.two_factor_recovery_codes or [])

    def replace_recovery_code(self, code: str):
        """Swap a used recovery code for a freshly generated one."""
        codes = list(self.two_factor_recovery_codes or [])
        if code not in codes:
            return

        codes[codes.index(code)] = two_factor_authentication.generate_recovery_code()
        self.two_factor_recovery_codes = codes
        self.save(update_fields=['two_factor_recovery_codes', 'updated_at'])
        logger.info(f"Recovery code used by user {self.pk}")

    def get_two_factor_qr_code_url(self) -> str:
        return two_factor_authentication.get_qr_code_url(
            settings.APP_NAME, self.email, self.two_factor_secret
        )

    def get_two_factor_qr_code_svg(self) -> str:
        return two_factor_authentication.render_qr_code_svg(self.get_two_factor_qr_code_url())

    def delete_avatar(self, save: bool = True):
        if self.avatar:
            self.avatar.delete(save=False)
        self.avatar = None
        if save:
            self.save(update_fields=['avatar', 'updated_at'])
