"""
Base Models and Mixins for the Donations App
============================================

Provides:
- UUID primary keys
- Common timestamp fields
- Active/inactive status tracking
"""

from django.db import models
import uuid


class BaseModel(models.Model):
    """
    Base model with common fields

    Features:
    - UUID primary key
    - Timestamp tracking (created, updated)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    # Timestamps
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="When this record was created"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When this record was last updated"
    )

    class Meta:
        abstract = True
        ordering = ['-created_at']


class StatusTrackingMixin(models.Model):
    """
    Mixin for models that can be switched on and off without deleting them
    """

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Is this record active?"
    )

    class Meta:
        abstract = True
