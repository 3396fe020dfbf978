"""
Base models for the portal.

These abstract models provide common functionality that can be inherited
by the concrete models of every app.
"""

import uuid
from django.db import models


class UUIDModel(models.Model):
    """
    Abstract model that uses UUID as primary key instead of auto-incrementing integer.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True


class TimestampedModel(models.Model):
    """
    Abstract model that provides created and updated timestamp fields.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
