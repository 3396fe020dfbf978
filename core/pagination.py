"""
Pagination for table endpoints.
"""
from django.core.paginator import Page
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.utils.urls import replace_query_param


class TablePagination(PageNumberPagination):
    """
    Page-number pagination that keeps the rest of the query string (sorts
    and filters) in every link and reports table metadata.

    A page past the end is served empty rather than as a 404, so a table
    left on a late page keeps working when a filter shrinks the results.
    Anything that is not a positive page number falls back to the first page.
    """
    page_size = 15
    page_query_param = 'page'

    def _page_link(self, number):
        return replace_query_param(self.request.build_absolute_uri(), self.page_query_param, number)

    def _requested_page(self, request, paginator) -> int:
        number = request.query_params.get(self.page_query_param) or 1
        if number in self.last_page_strings:
            return paginator.num_pages

        try:
            return max(int(number), 1)
        except (TypeError, ValueError):
            return 1

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        paginator = self.django_paginator_class(queryset, self.get_page_size(request))
        number = self._requested_page(request, paginator)

        if number > paginator.num_pages:
            self.page = Page([], number, paginator)
        else:
            self.page = paginator.page(number)

        return list(self.page)

    def get_previous_link(self):
        if self.page.number > self.page.paginator.num_pages:
            return self._page_link(self.page.number - 1)
        return super().get_previous_link()

    def get_paginated_data(self, data):
        page = self.page
        paginator = page.paginator
        has_rows = len(page) > 0

        return {
            'data': data,
            'links': {
                'first': self._page_link(1),
                'last': self._page_link(paginator.num_pages),
                'prev': self.get_previous_link(),
                'next': self.get_next_link(),
            },
            'meta': {
                'current_page': page.number,
                'from': page.start_index() if has_rows else None,
                'to': page.end_index() if has_rows else None,
                'last_page': paginator.num_pages,
                'per_page': paginator.per_page,
                'total': paginator.count,
                'path': self.request.build_absolute_uri(self.request.path),
            },
        }

    def get_paginated_response(self, data):
        return Response(self.get_paginated_data(data))
