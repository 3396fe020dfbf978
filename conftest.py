"""
Test configuration for the account portal
"""
import os
import sys

import pytest

# Make the project packages importable when pytest runs from elsewhere
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'test_settings')


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()
