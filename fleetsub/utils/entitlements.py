"""
Entitlement gates for plan-restricted routes.

Each gate loads the caller's subscription itself and raises an ``ApiError``
subclass to refuse the request. Apply them after ``jwt_required()``:

    @jwt_required()
    @require_active_subscription()
    @check_driver_limit()
    def post(self): ...
"""
import logging
from functools import wraps
from http import HTTPStatus

from flask import current_app, g

from fleetsub.errors import (
    DriverLimitReached,
    FeatureNotAvailable,
    NoSubscription,
    SubscriptionExpired,
    SubscriptionInactive,
)
from fleetsub.models.driver import Driver
from fleetsub.models.plan import get_plan_catalog
from fleetsub.models.subscription import Subscription
from fleetsub.services import subscription_service
from fleetsub.utils.auth import current_user_id

logger = logging.getLogger(__name__)


def _existing_subscription(user_id):
    subscription = Subscription.get_for_user(user_id)
    if subscription is None:
        raise NoSubscription("No subscription found", status_code=HTTPStatus.FORBIDDEN)
    return subscription


def require_active_subscription():
    """
    Admit callers whose subscription is active or trialing and within period.

    Provisions a trial for users without a subscription. The period end is
    checked on every request, so a stale ``active`` status still expires.
    The loaded subscription is exposed as ``flask.g.subscription``.
    """
    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            user_id = current_user_id()
            subscription = subscription_service.get_or_create_subscription(
                user_id, get_plan_catalog(),
                trial_plan=current_app.config.get('DEFAULT_PLAN', 'starter'),
            )

            if not subscription.is_entitled:
                logger.info("User %s refused: subscription %s", user_id, subscription.status)
                raise SubscriptionInactive(subscription.status)

            if subscription_service.expire_if_due(subscription):
                logger.info("User %s refused: subscription period ended", user_id)
                raise SubscriptionExpired(subscription.status)

            g.subscription = subscription
            return fn(*args, **kwargs)
        return decorator
    return wrapper


def check_driver_limit():
    """Refuse new drivers once the plan's driver quota is used up."""
    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            user_id = current_user_id()
            subscription = _existing_subscription(user_id)

            if not subscription.unlimited_drivers:
                driver_count = Driver.count_for_user(user_id)
                if driver_count >= subscription.max_drivers:
                    logger.info(
                        "User %s refused: %s/%s drivers on %s",
                        user_id, driver_count, subscription.max_drivers, subscription.plan
                    )
                    raise DriverLimitReached(
                        driver_count, subscription.max_drivers, subscription.plan
                    )

            return fn(*args, **kwargs)
        return decorator
    return wrapper


def require_feature(feature_name):
    """
    Refuse callers whose plan lacks ``feature_name``.

    Args:
        feature_name (str): Feature flag, e.g. ``advancedAnalytics``
    """
    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            user_id = current_user_id()
            subscription = _existing_subscription(user_id)

            if not subscription.has_feature(feature_name):
                logger.info(
                    "User %s refused: %s not in %s plan",
                    user_id, feature_name, subscription.plan
                )
                raise FeatureNotAvailable(feature_name, subscription.plan)

            return fn(*args, **kwargs)
        return decorator
    return wrapper
