from django.utils.translation import gettext_lazy as _
from rest_framework import permissions

from .services import auth_service


class IsGuest(permissions.BasePermission):
    """Only allow requests from clients that are not logged in."""

    message = _('You are already logged in.')

    def has_permission(self, request, view):
        return not (request.user and request.user.is_authenticated)


class IsVerified(permissions.BasePermission):
    """Require an authenticated user with a verified email address."""

    message = _('Your email address is not verified.')

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.has_verified_email()
        )


class PasswordRecentlyConfirmed(permissions.BasePermission):
    """Require the password to have been confirmed within the timeout."""

    message = _('Password confirmation required.')

    def has_permission(self, request, view):
        return auth_service.password_recently_confirmed(request)
