"""
Session authentication views: registration, login, two factor challenge,
password reset, password confirmation and email verification.
"""
from django.utils.translation import gettext as _
from rest_framework import serializers, status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.throttling import PasswordResetThrottle, VerificationThrottle
from localisation.services import localisation

from .permissions import IsGuest
from .serializers import (
    ConfirmPasswordSerializer, ForgotPasswordSerializer, LoginSerializer,
    RegisterSerializer, ResetPasswordSerializer, TwoFactorChallengeSerializer,
    UserSerializer,
)
from .services import (
    auth_service, email_verification_service, password_reset_service,
    registration_service,
)


@api_view(['POST'])
@permission_classes([IsGuest])
def register_view(request):
    """
    Create an account and log it in

    POST /api/register/
    """
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = registration_service.register(request, serializer.to_data())
    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsGuest])
def login_view(request):
    """
    Login with email and password

    POST /api/login/
    {
        "email": "user@example.com",
        "password": "password",
        "remember": true
    }

    Users with two factor authentication enabled get ``{"two_factor": true}``
    and must complete the challenge before they are logged in.
    """
    serializer = LoginSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)

    user = serializer.validated_data['user']
    remember = serializer.to_data().remember

    if user.has_two_factor_enabled():
        auth_service.start_two_factor_challenge(request, user, remember)
        return Response({'two_factor': True})

    auth_service.login(request, user, remember)
    return Response(UserSerializer(user).data)


@api_view(['GET', 'POST'])
@permission_classes([IsGuest])
def two_factor_challenge_view(request):
    """
    Complete a login with a TOTP or recovery code

    GET  /api/two-factor-challenge/
    POST /api/two-factor-challenge/
    {
        "code": "123456",
        "is_recovery": false
    }
    """
    if request.method == 'GET':
        if auth_service.challenged_user(request) is None:
            return Response(
                {'detail': _('Your login session has expired. Please log in again.')},
                status=status.HTTP_400_BAD_REQUEST
            )
        return Response({'two_factor': True})

    serializer = TwoFactorChallengeSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)

    user = serializer.validated_data['user']
    auth_service.complete_two_factor_challenge(
        request, user, recovery_code=serializer.validated_data['recovery_code']
    )
    return Response(UserSerializer(user).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """
    Logout and flush the session

    POST /api/logout/
    """
    auth_service.logout(request)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def me_view(request):
    """
    Props shared by every page: the current user and the supported locales

    GET /api/auth/me/
    """
    user = request.user if request.user.is_authenticated else None

    return Response({
        'user': UserSerializer(user).data if user else None,
        'supported_locales': localisation.get_supported_locales('iso639'),
    })


@api_view(['POST'])
@permission_classes([IsGuest])
@throttle_classes([PasswordResetThrottle])
def forgot_password_view(request):
    """
    Email a password reset link

    POST /api/forgot-password/
    """
    serializer = ForgotPasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    if not password_reset_service.send_reset_link(serializer.validated_data['user']):
        raise serializers.ValidationError({'email': [_('Please wait before retrying.')]})

    return Response({'status': _('We have emailed your password reset link.')})


@api_view(['POST'])
@permission_classes([IsGuest])
def reset_password_view(request):
    """
    Set a new password using a reset token

    POST /api/reset-password/
    """
    serializer = ResetPasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    password_reset_service.reset(serializer.validated_data['user'], serializer.to_data())
    return Response({'status': _('Your password has been reset.')})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def confirm_password_view(request):
    """
    Confirm the current password before sensitive actions

    GET  /api/confirm-password/
    POST /api/confirm-password/
    """
    if request.method == 'GET':
        return Response({'confirmed': auth_service.password_recently_confirmed(request)})

    serializer = ConfirmPasswordSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)

    auth_service.confirm_password(request)
    return Response({'confirmed': True})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def verification_notice_view(request):
    """
    Email verification status of the current user

    GET /api/verify-email/
    """
    return Response({'verified': request.user.has_verified_email()})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
@throttle_classes([VerificationThrottle])
def verify_email_view(request, id, hash):
    """
    Verify the email address from a signed link

    GET /api/verify-email/<id>/<hash>/
    """
    if not email_verification_service.verify(request.user, id, hash):
        raise PermissionDenied(_('This verification link is invalid or has expired.'))

    return Response({'verified': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([VerificationThrottle])
def send_verification_view(request):
    """
    Resend the verification email

    POST /api/email/verification-notification/
    """
    if not email_verification_service.send(request, request.user):
        return Response({'status': 'already-verified'})

    return Response({'status': 'verification-link-sent'}, status=status.HTTP_202_ACCEPTED)
