"""
Middleware that activates the negotiated locale for every request.
"""
from django.utils import translation

from .services import localisation


class SetLocaleMiddleware:
    """
    Activate the request locale.

    Must run after ``AuthenticationMiddleware`` so the user's saved language
    can take precedence over the Accept-Language header.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        locale = localisation.set_locale_from_request(request)
        request.LANGUAGE_CODE = translation.get_language()
        request.locale = locale

        response = self.get_response(request)

        response.headers.setdefault('Content-Language', localisation.get_iso639_locale(locale))
        return response
