"""
Two factor authentication management for the logged in user.
"""
import logging

from django.utils.translation import gettext as _
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .exceptions import TwoFactorSetupError
from .permissions import IsVerified, PasswordRecentlyConfirmed
from .serializers import TwoFactorCodeSerializer
from .services import two_factor_service

logger = logging.getLogger(__name__)


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsVerified])
def two_factor_view(request):
    """
    Enable or disable two factor authentication

    POST   /api/user/two-factor-authentication/
    DELETE /api/user/two-factor-authentication/
    {
        "code": "123456"
    }

    Enabling returns the QR code and secret; the setup stays pending until
    it is confirmed with a code.
    """
    if request.method == 'DELETE':
        serializer = TwoFactorCodeSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        two_factor_service.disable(request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    try:
        setup = two_factor_service.enable(request.user)
    except TwoFactorSetupError:
        return Response(
            {'message': _('Unable to enable two factor authentication. Please try again.')},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return Response(setup)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsVerified])
def two_factor_confirm_view(request):
    """
    Confirm a pending two factor setup

    POST /api/user/confirmed-two-factor-authentication/
    {
        "code": "123456"
    }
    """
    serializer = TwoFactorCodeSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)

    two_factor_service.confirm(request.user)
    return Response({'two_factor_enabled': request.user.has_two_factor_enabled()})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsVerified, PasswordRecentlyConfirmed])
def recovery_codes_view(request):
    """
    List the recovery codes

    GET /api/user/two-factor-recovery-codes/
    """
    return Response({'recovery_codes': request.user.two_factor_recovery_codes or []})
