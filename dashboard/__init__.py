"""
Admin dashboard: a filterable, sortable and paginated table of users.
"""
