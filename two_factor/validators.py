from django.utils.translation import gettext_lazy as _
from rest_framework import serializers


class ValidCodeValidator:
    """
    Validate a TOTP code against the requesting user's secret.

    Needs the serializer context to carry the request.
    """

    requires_context = True
    message = _('The provided two factor authentication code was invalid.')

    def __call__(self, value, serializer_field):
        request = serializer_field.context.get('request')
        user = getattr(request, 'user', None)

        if user is None or not user.is_authenticated or not user.verify_two_factor_code(str(value)):
            raise serializers.ValidationError(self.message, code='invalid_code')
