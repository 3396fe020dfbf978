"""
Renderer and parsers that translate key casing at the API boundary.

Python code works with snake_case keys throughout; clients send and receive
camelCase.
"""
import re

from django.http import QueryDict
from rest_framework.parsers import DataAndFiles, FormParser, JSONParser, MultiPartParser
from rest_framework.renderers import JSONRenderer
from rest_framework.utils.serializer_helpers import ReturnDict, ReturnList

_CAMEL_PATTERN = re.compile(r'(?<=[a-z0-9])_([a-z0-9])')
_SNAKE_PATTERN = re.compile(r'(?<=[a-z0-9])([A-Z])')


def to_camel_case(value: str) -> str:
    """``created_at`` -> ``createdAt``; leading underscores are kept."""
    return _CAMEL_PATTERN.sub(lambda match: match.group(1).upper(), value)


def to_snake_case(value: str) -> str:
    """``createdAt`` -> ``created_at``."""
    return _SNAKE_PATTERN.sub(lambda match: '_' + match.group(1).lower(), value)


def _transform_keys(data, transform):
    if isinstance(data, (dict, ReturnDict)):
        return {
            transform(key) if isinstance(key, str) else key: _transform_keys(value, transform)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple, ReturnList)):
        return [_transform_keys(item, transform) for item in data]
    return data


def camelize(data):
    return _transform_keys(data, to_camel_case)


def underscoreize(data):
    return _transform_keys(data, to_snake_case)


class CamelCaseJSONRenderer(JSONRenderer):
    """Render response payloads with camelCase keys."""

    def render(self, data, accepted_media_type=None, renderer_context=None):
        return super().render(camelize(data), accepted_media_type, renderer_context)


class CamelCaseJSONParser(JSONParser):
    """Parse camelCase request bodies into snake_case keys."""

    def parse(self, stream, media_type=None, parser_context=None):
        return underscoreize(super().parse(stream, media_type, parser_context))


def _underscoreize_lists(data):
    """Snake-case the keys of a ``QueryDict`` or ``MultiValueDict``, keeping every value."""
    converted = QueryDict(mutable=True) if isinstance(data, QueryDict) else type(data)()
    for key, values in data.lists():
        converted.setlist(to_snake_case(key), values)

    if isinstance(converted, QueryDict):
        converted._mutable = False
    return converted


class CamelCaseFormParser(FormParser):
    """Parse url-encoded form bodies into snake_case keys."""

    def parse(self, stream, media_type=None, parser_context=None):
        return _underscoreize_lists(super().parse(stream, media_type, parser_context))


class CamelCaseMultiPartParser(MultiPartParser):
    """Parse multipart bodies, files included, into snake_case keys."""

    def parse(self, stream, media_type=None, parser_context=None):
        parsed = super().parse(stream, media_type, parser_context)
        return DataAndFiles(_underscoreize_lists(parsed.data), _underscoreize_lists(parsed.files))
