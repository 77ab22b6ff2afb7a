"""
Namespaces for the plan catalog and the caller's subscription.
"""
from flask_restx import Namespace

subscription_ns = Namespace(
    'subscription',
    description="Current user's subscription, limits and usage"
)

plan_ns = Namespace(
    'plans',
    description='Subscription plan catalog'
)

from . import routes  # noqa: E402,F401
