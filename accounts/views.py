"""
Account management views for the logged in user.
"""
import logging

from django.utils.translation import gettext as _
from rest_framework import serializers, status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.renderers import CamelCaseFormParser, CamelCaseJSONParser, CamelCaseMultiPartParser
from images import ImageProcessorError

from .permissions import IsVerified
from .serializers import (
    DeleteAccountSerializer, UpdateAccountSerializer, UpdateAvatarSerializer,
    UpdatePasswordSerializer, UpdatePreferencesSerializer, UserSerializer,
)
from .services import account_service

logger = logging.getLogger(__name__)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsVerified])
def account_view(request):
    """
    Show, update or delete the account

    GET    /api/account/
    PUT    /api/account/      {"name": ..., "email": ...}
    DELETE /api/account/      {"password": ...}

    Changing the email address marks it unverified and sends a new
    verification link.
    """
    user = request.user

    if request.method == 'GET':
        return Response(UserSerializer(user).data)

    if request.method == 'DELETE':
        serializer = DeleteAccountSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        account_service.delete_account(request, user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = UpdateAccountSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)

    user = account_service.update_account(request, user, serializer.to_data())
    return Response(UserSerializer(user).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsVerified])
def password_view(request):
    """
    Change the password

    PUT /api/account/password/
    """
    serializer = UpdatePasswordSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)

    account_service.update_password(request, request.user, serializer.validated_data['password'])
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsVerified])
def preferences_view(request):
    """
    Show or update the preferred language

    GET /api/account/preferences/
    PUT /api/account/preferences/   {"language": "fr"}
    """
    if request.method == 'PUT':
        serializer = UpdatePreferencesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        account_service.update_preferences(request.user, serializer.to_data())

    return Response({'language': request.user.language})


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsVerified])
@parser_classes([CamelCaseMultiPartParser, CamelCaseFormParser, CamelCaseJSONParser])
def avatar_view(request):
    """
    Upload or remove the avatar

    POST   /api/account/avatar/   multipart with an ``avatar`` image, or
                                  ``{"avatar": null}`` to remove it
    DELETE /api/account/avatar/
    """
    user = request.user

    if request.method == 'DELETE':
        account_service.delete_avatar(user)
        return Response(UserSerializer(user).data)

    serializer = UpdateAvatarSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    avatar = serializer.validated_data['avatar']
    if avatar is None:
        account_service.delete_avatar(user)
        return Response(UserSerializer(user).data)

    try:
        account_service.update_avatar(user, avatar)
    except ImageProcessorError:
        logger.exception(f"Avatar processing failed for user {user.pk}")
        raise serializers.ValidationError({
            'avatar': [_('There was a problem updating your avatar.')],
        })

    return Response(UserSerializer(user).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsVerified])
def security_view(request):
    """
    Two factor status for the security settings page

    GET /api/account/security/
    """
    user = request.user

    return Response({
        'two_factor_enabled': user.has_two_factor_enabled(),
        'two_factor_pending': bool(user.two_factor_secret) and not user.has_two_factor_enabled(),
    })
