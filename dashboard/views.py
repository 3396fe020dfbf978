"""
Dashboard views.
"""
from django.utils.translation import gettext as _
from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.models import User
from accounts.permissions import IsVerified
from core.pagination import TablePagination
from core.renderers import to_snake_case

from .filters import UserFilter, extract_filters
from .serializers import DashboardUserSerializer

DEFAULT_SORT = 'name'
ALLOWED_SORTS = ['name', 'email', 'language']


def parse_sorts(value):
    """
    Parse ``sort=-email,name`` into ``[{'id': 'email', 'desc': True}, ...]``.

    Raises a validation error for columns that cannot be sorted on.
    """
    if not value:
        return []

    sorts = []
    for item in value.split(','):
        item = item.strip()
        if not item:
            continue
        desc = item.startswith('-')
        sorts.append({'id': to_snake_case(item.lstrip('-')), 'desc': desc})

    unknown = [sort['id'] for sort in sorts if sort['id'] not in ALLOWED_SORTS]
    if unknown:
        raise serializers.ValidationError({
            'sort': [
                _('Requested sort(s) `%(unknown)s` is not allowed. Allowed sort(s) are `%(allowed)s`.')
                % {'unknown': ', '.join(unknown), 'allowed': ', '.join(ALLOWED_SORTS)}
            ],
        })

    return sorts


def validate_filters(filters):
    allowed = UserFilter.allowed_filters()
    unknown = [key for key in filters if key not in allowed]
    if unknown:
        raise serializers.ValidationError({
            'filter': [
                _('Requested filter(s) `%(unknown)s` are not allowed. Allowed filter(s) are `%(allowed)s`.')
                % {'unknown': ', '.join(unknown), 'allowed': ', '.join(allowed)}
            ],
        })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsVerified])
def dashboard_view(request):
    """
    Paginated user table

    GET /api/dashboard/?filter[search]=ada&filter[verified]=1&sort=-email&page=2

    The requested sorts and filters are echoed back (``null`` when none were
    given) so the table can restore its state.
    """
    filters = extract_filters(request.query_params)
    validate_filters(filters)
    sorts = parse_sorts(request.query_params.get('sort'))

    filterset = UserFilter.from_request_filters(filters, queryset=User.objects.all())
    if not filterset.is_valid():
        raise serializers.ValidationError(filterset.errors)

    ordering = [f"{'-' if sort['desc'] else ''}{sort['id']}" for sort in sorts] or [DEFAULT_SORT]
    queryset = filterset.qs.order_by(*ordering, 'pk')

    paginator = TablePagination()
    page = paginator.paginate_queryset(queryset, request)

    return Response({
        'users': paginator.get_paginated_data(DashboardUserSerializer(page, many=True).data),
        'sorts': sorts or None,
        'filters': filters or None,
    })
