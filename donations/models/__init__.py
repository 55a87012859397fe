"""
Donations - Models Package
==========================

This file imports and exposes all models for Django.
"""

from .base import (
    BaseModel,
    StatusTrackingMixin,
)

from .all_models import (
    # Constants
    PROGRAM_TYPE_CHOICES,
    HEX_COLOR_VALIDATOR,

    # Organisation
    Branch,
    Team,
    User,

    # Master data
    Program,
    PaymentMethod,

    # Donations
    Transaction,

    # Settings
    AppSetting,
)

from donations.managers import UserManager, REJECTED_STATUSES


__all__ = [
    'BaseModel',
    'StatusTrackingMixin',
    'PROGRAM_TYPE_CHOICES',
    'HEX_COLOR_VALIDATOR',
    'REJECTED_STATUSES',
    'Branch',
    'Team',
    'User',
    'UserManager',
    'Program',
    'PaymentMethod',
    'Transaction',
    'AppSetting',
]
