"""
Models package for SQLAlchemy database models and the static plan catalog.
"""
from .base import BaseModel
from .user import User, UserRole
from .driver import Driver, DriverStatus, LicenseClass
from .plan import Plan, PlanCatalog, PlanFeatures
from .subscription import Subscription, SubscriptionStatus

__all__ = [
    'BaseModel',
    'User',
    'UserRole',
    'Driver',
    'DriverStatus',
    'LicenseClass',
    'Plan',
    'PlanCatalog',
    'PlanFeatures',
    'Subscription',
    'SubscriptionStatus',
]
