"""
API exception handling.
"""
import logging

from rest_framework import exceptions
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
    if isinstance(detail, (list, tuple)):
        for value in detail:
            return _first_message(value)
    return str(detail) if detail else ''


def api_exception_handler(exc, context):
    """
    Wrap DRF's default handler.

    Validation failures are returned as ``{"message": ..., "errors": {...}}``
    so clients can show the first error and map the rest onto form fields.
    Anything DRF does not handle is logged and left to Django's 500 handling.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception(
            f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}",
            exc_info=exc,
        )
        return None

    if isinstance(exc, exceptions.ValidationError):
        errors = exc.detail if isinstance(exc.detail, dict) else {'non_field_errors': exc.detail}
        response.data = {
            'message': _first_message(errors),
            'errors': errors,
        }

    return response
