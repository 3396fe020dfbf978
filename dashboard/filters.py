"""
Filters for the dashboard user table.

Filters arrive as ``filter[<key>]=<value>`` query parameters. ``name``,
``email`` and ``language`` accept an operator prefix (``>=``, ``<>`` ...);
``created_at`` takes either an inclusive ``from,to`` range or a single
operator-prefixed date.
"""
import datetime
import re

import django_filters
from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from django_filters.constants import EMPTY_VALUES
from django_filters.widgets import BooleanWidget

from accounts.models import User
from core.renderers import to_snake_case

# Longest first so ">=" is not read as ">"
OPERATORS = ['>=', '<=', '<>', '!=', '>', '<', '=']

COMPARISON_LOOKUPS = {
    '>': 'gt',
    '>=': 'gte',
    '<': 'lt',
    '<=': 'lte',
}

NEGATED_OPERATORS = ('<>', '!=')

FILTER_PARAM_PATTERN = re.compile(r'^filter\[(?P<key>[^\]]+)\]$')


def split_operator(value: str):
    """Return ``(operator, operand)``; no prefix means equality."""
    for operator in OPERATORS:
        if value.startswith(operator):
            return operator, value[len(operator):]
    return '=', value


def extract_filters(query_params) -> dict:
    """Collect ``filter[...]`` parameters keyed by their snake_case name."""
    filters = {}
    for param in query_params:
        match = FILTER_PARAM_PATTERN.match(param)
        if match:
            filters[to_snake_case(match.group('key'))] = query_params.get(param)
    return filters


class OperatorFilter(django_filters.CharFilter):
    """
    Equality by default, IN for comma separated values and NOT IN for
    ``<>``/``!=``. Comparison operators use the raw operand.
    """

    def filter(self, qs, value):
        if value in EMPTY_VALUES:
            return qs

        operator, operand = split_operator(value)

        if operator in COMPARISON_LOOKUPS:
            return qs.filter(**{f'{self.field_name}__{COMPARISON_LOOKUPS[operator]}': operand})

        values = [item.strip() for item in operand.split(',')]
        if len(values) > 1:
            condition = Q(**{f'{self.field_name}__in': values})
        else:
            condition = Q(**{self.field_name: operand})

        if operator in NEGATED_OPERATORS:
            return qs.exclude(condition)
        return qs.filter(condition)


class DateFilter(django_filters.CharFilter):
    """Inclusive ``from,to`` range or an operator-prefixed single date."""

    def filter(self, qs, value):
        if value in EMPTY_VALUES:
            return qs

        if ',' in value:
            start, end = value.split(',', 1)
            start = self._parse_bound(start.strip())
            end = self._parse_bound(end.strip(), end_of_day=True)
            if start is None or end is None:
                return qs
            return qs.filter(**{f'{self.field_name}__range': (start, end)})

        operator, operand = split_operator(value)
        date = self._parse_date(operand.strip())
        if date is None:
            return qs

        if operator in COMPARISON_LOOKUPS:
            return qs.filter(**{f'{self.field_name}__date__{COMPARISON_LOOKUPS[operator]}': date})

        condition = Q(**{f'{self.field_name}__date': date})
        if operator in NEGATED_OPERATORS:
            return qs.exclude(condition)
        return qs.filter(condition)

    @staticmethod
    def _parse_date(value: str):
        try:
            date = parse_date(value)
            if date is not None:
                return date
            parsed = parse_datetime(value)
        except ValueError:
            return None
        return parsed.date() if parsed is not None else None

    @staticmethod
    def _parse_bound(value: str, end_of_day: bool = False):
        """Parse a range bound into an aware UTC datetime."""
        try:
            date = parse_date(value)
            if date is not None:
                parsed = datetime.datetime.combine(
                    date, datetime.time.max if end_of_day else datetime.time.min
                )
            else:
                parsed = parse_datetime(value)
        except ValueError:
            return None

        if parsed is None:
            return None

        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed, datetime.timezone.utc)
        return parsed


class UserFilter(django_filters.FilterSet):
    """Filter for the dashboard user table."""

    search = django_filters.CharFilter(method='filter_search')

    # Partial matches, exposed as ``_name`` and ``_email``
    name_partial = django_filters.CharFilter(field_name='name', lookup_expr='icontains')
    email_partial = django_filters.CharFilter(field_name='email', lookup_expr='icontains')

    name = OperatorFilter(field_name='name')
    email = OperatorFilter(field_name='email')
    language = OperatorFilter(field_name='language')

    verified = django_filters.BooleanFilter(method='filter_verified', widget=BooleanWidget())
    created_at = DateFilter(field_name='created_at')

    aliases = {
        '_name': 'name_partial',
        '_email': 'email_partial',
    }

    class Meta:
        model = User
        fields = []

    @classmethod
    def allowed_filters(cls):
        hidden = set(cls.aliases.values())
        return list(cls.aliases) + [name for name in cls.base_filters if name not in hidden]

    @classmethod
    def from_request_filters(cls, filters: dict, queryset):
        """Build a bound FilterSet from extracted ``filter[...]`` values."""
        data = {cls.aliases.get(key, key): value for key, value in filters.items()}
        return cls(data, queryset=queryset)

    def filter_search(self, queryset, name, value):
        """Filter users whose name or email contains the value."""
        return queryset.filter(Q(name__icontains=value) | Q(email__icontains=value))

    def filter_verified(self, queryset, name, value):
        return queryset.filter(email_verified_at__isnull=not value)
