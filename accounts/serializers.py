"""
Request validation for the account endpoints.

Each input serializer exposes ``to_data()`` returning the data object its
service expects.
"""
import logging

from django.conf import settings
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.translation import gettext as _
from rest_framework import serializers

from core.throttling import rate_limiter
from localisation.fields import LocaleField
from two_factor.validators import ValidCodeValidator

from .data import LoginData, RegisterData, ResetPasswordData, UpdateAccountData, UpdatePreferencesData
from .models import User
from .services import auth_service, password_reset_service

logger = logging.getLogger(__name__)


class UserSerializer(serializers.ModelSerializer):
    """Serializer for user data"""
    has_verified_email = serializers.SerializerMethodField()
    two_factor_enabled = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'name', 'email', 'language', 'avatar_url', 'email_verified_at',
            'has_verified_email', 'two_factor_enabled', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_has_verified_email(self, obj):
        return obj.has_verified_email()

    def get_two_factor_enabled(self, obj):
        return obj.has_two_factor_enabled()


class PasswordConfirmationMixin:
    """Check ``password_confirmation`` and run Django's password validators."""

    def validate_new_password(self, attrs, user=None):
        if attrs['password'] != attrs.get('password_confirmation'):
            raise serializers.ValidationError({
                'password': [_('The password field confirmation does not match.')],
            })

        try:
            validate_password(attrs['password'], user=user)
        except DjangoValidationError as e:
            raise serializers.ValidationError({'password': list(e.messages)})

        return attrs


class UniqueEmailMixin:

    def clean_email(self, value, exclude=None):
        value = value.strip().lower()

        queryset = User.objects.filter(email__iexact=value)
        if exclude is not None:
            queryset = queryset.exclude(pk=exclude.pk)

        if queryset.exists():
            raise serializers.ValidationError(_('The email has already been taken.'))

        return value


class RegisterSerializer(PasswordConfirmationMixin, UniqueEmailMixin, serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(max_length=255)
    language = serializers.CharField(max_length=10, required=False, allow_blank=True, allow_null=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    password_confirmation = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_email(self, value):
        return self.clean_email(value)

    def validate(self, attrs):
        return self.validate_new_password(attrs, user=User(name=attrs['name'], email=attrs['email']))

    def to_data(self) -> RegisterData:
        data = self.validated_data
        return RegisterData(
            name=data['name'],
            email=data['email'],
            password=data['password'],
            language=data.get('language') or None,
        )


class LoginSerializer(serializers.Serializer):
    """
    Authenticate by email and password.

    Failed attempts are counted per email and client address; the key locks
    for a minute after five failures.
    """
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)
    remember = serializers.BooleanField(default=False)

    def validate(self, attrs):
        request = self.context['request']
        key = auth_service.throttle_key(request, attrs['email'])

        ensure_is_not_rate_limited(key, auth_service.max_login_attempts, 'email')

        user = authenticate(request, username=attrs['email'].lower(), password=attrs['password'])
        if not user:
            rate_limiter.hit(key, auth_service.decay_seconds)
            logger.warning(f"Failed login attempt for {attrs['email']}")
            raise serializers.ValidationError({
                'email': [_('These credentials do not match our records.')],
            })

        rate_limiter.clear(key)
        attrs['user'] = user
        return attrs

    def to_data(self) -> LoginData:
        data = self.validated_data
        return LoginData(email=data['email'], password=data['password'], remember=data['remember'])


class TwoFactorChallengeSerializer(serializers.Serializer):
    """Second login step for users with two factor authentication enabled."""
    code = serializers.CharField(max_length=255, trim_whitespace=True)
    is_recovery = serializers.BooleanField(default=False)

    def validate(self, attrs):
        request = self.context['request']

        user = auth_service.challenged_user(request)
        if user is None:
            raise serializers.ValidationError({
                'code': [_('Your login session has expired. Please log in again.')],
            })

        key = auth_service.throttle_key(request, user.email, prefix='two_factor_login_attempt')
        ensure_is_not_rate_limited(key, auth_service.max_login_attempts, 'code')

        if attrs['is_recovery']:
            valid = user.verify_two_factor_recovery_code(attrs['code'])
            message = _('The provided two factor recovery code was invalid.')
        else:
            valid = user.verify_two_factor_code(attrs['code'])
            message = _('The provided two factor authentication code was invalid.')

        if not valid:
            rate_limiter.hit(key, auth_service.decay_seconds)
            logger.warning(f"Invalid two factor code for user {user.pk}")
            raise serializers.ValidationError({'code': [message]})

        rate_limiter.clear(key)
        attrs['user'] = user
        attrs['recovery_code'] = attrs['code'] if attrs['is_recovery'] else None
        return attrs


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate(self, attrs):
        user = password_reset_service.find_user(attrs['email'])
        if user is None:
            raise serializers.ValidationError({
                'email': [_("We can't find a user with that email address.")],
            })

        attrs['user'] = user
        return attrs


class ResetPasswordSerializer(PasswordConfirmationMixin, serializers.Serializer):
    token = serializers.CharField()
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    password_confirmation = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        user = password_reset_service.find_user(attrs['email'])
        if user is None or not password_reset_service.check_token(user, attrs['token']):
            raise serializers.ValidationError({
                'email': [_('This password reset token is invalid.')],
            })

        attrs = self.validate_new_password(attrs, user=user)
        attrs['user'] = user
        return attrs

    def to_data(self) -> ResetPasswordData:
        data = self.validated_data
        return ResetPasswordData(token=data['token'], email=data['email'], password=data['password'])


class ConfirmPasswordSerializer(serializers.Serializer):
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_password(self, value):
        if not self.context['request'].user.check_password(value):
            raise serializers.ValidationError(_('The provided password was incorrect.'))
        return value


class TwoFactorCodeSerializer(serializers.Serializer):
    """A TOTP code for the current user's secret."""
    code = serializers.CharField(max_length=255, validators=[ValidCodeValidator()])


class UpdateAccountSerializer(UniqueEmailMixin, serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(max_length=255)

    def validate_email(self, value):
        return self.clean_email(value, exclude=self.context['request'].user)

    def to_data(self) -> UpdateAccountData:
        return UpdateAccountData(name=self.validated_data['name'], email=self.validated_data['email'])


class UpdatePasswordSerializer(PasswordConfirmationMixin, serializers.Serializer):
    current_password = serializers.CharField(write_only=True, trim_whitespace=False)
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    password_confirmation = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_current_password(self, value):
        if not self.context['request'].user.check_password(value):
            raise serializers.ValidationError(_('The password is incorrect.'))
        return value

    def validate(self, attrs):
        return self.validate_new_password(attrs, user=self.context['request'].user)


class DeleteAccountSerializer(serializers.Serializer):
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_password(self, value):
        if not self.context['request'].user.check_password(value):
            raise serializers.ValidationError(_('The password is incorrect.'))
        return value


class UpdatePreferencesSerializer(serializers.Serializer):
    language = LocaleField()

    def to_data(self) -> UpdatePreferencesData:
        return UpdatePreferencesData(language=self.validated_data['language'])


class UpdateAvatarSerializer(serializers.Serializer):
    avatar = serializers.ImageField(allow_null=True)

    def validate_avatar(self, value):
        if value is not None and value.size > settings.AVATAR_MAX_UPLOAD_SIZE:
            raise serializers.ValidationError(
                _('The avatar may not be greater than %(size)d kilobytes.')
                % {'size': settings.AVATAR_MAX_UPLOAD_SIZE // 1024}
            )
        return value


def ensure_is_not_rate_limited(key: str, max_attempts: int, field: str):
    """Raise a validation error on ``field`` while ``key`` is locked out."""
    if not rate_limiter.too_many_attempts(key, max_attempts):
        return

    seconds = rate_limiter.available_in(key)
    logger.warning(f"Login locked out for {key}, retry in {seconds}s")
    raise serializers.ValidationError({
        field: [_('Too many login attempts. Please try again in %(seconds)d seconds.') % {'seconds': seconds}],
    })
