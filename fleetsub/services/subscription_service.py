"""
Subscription lifecycle and usage reporting.

Every function takes the plan catalog explicitly and an optional ``now`` so
callers control both the plan definitions and the clock.
"""
import logging
import math

from sqlalchemy.exc import IntegrityError

from fleetsub import db
from fleetsub.errors import DowngradeBlocked, NoSubscription
from fleetsub.models.base import utcnow
from fleetsub.models.driver import Driver, DriverStatus
from fleetsub.models.subscription import Subscription, SubscriptionStatus
from fleetsub.utils.dates import days_until

logger = logging.getLogger(__name__)

UNLIMITED = "Unlimited"
CREATE_ATTEMPTS = 3
DEFAULT_TRIAL_PLAN = "starter"


def get_or_create_subscription(user_id, catalog, now=None, trial_plan=DEFAULT_TRIAL_PLAN):
    """
    Fetch the user's subscription, provisioning a trial on first access.

    Concurrent first requests race on the unique ``user_id`` index; the
    loser rolls back and reads the winner's row.

    Args:
        user_id (int): User ID
        catalog (PlanCatalog): Plan definitions
        now (datetime, optional): Trial start
        trial_plan (str, optional): Plan to provision the trial on

    Returns:
        Subscription: The existing or newly created subscription
    """
    for _ in range(CREATE_ATTEMPTS):
        subscription = Subscription.get_for_user(user_id)
        if subscription is not None:
            return subscription

        subscription = Subscription.start_trial(user_id, catalog.get_plan(trial_plan), now)
        db.session.add(subscription)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            logger.info("Trial for user %s created concurrently, re-fetching", user_id)
            continue

        logger.info(
            "Provisioned %s trial for user %s until %s",
            subscription.plan, user_id, subscription.current_period_end
        )
        return subscription

    raise RuntimeError(f"Could not load or create a subscription for user {user_id}")


def get_subscription(user_id):
    """Return the user's subscription or raise ``NoSubscription``."""
    subscription = Subscription.get_for_user(user_id)
    if subscription is None:
        raise NoSubscription()
    return subscription


def ensure_driver_capacity(subscription, plan):
    """
    Refuse a move to ``plan`` when the user has more drivers than it allows.

    The live count is only taken when the target plan is limited and its
    quota is below the current one.

    Raises:
        DowngradeBlocked: If the live driver count exceeds the plan's quota
    """
    if plan.unlimited_drivers:
        return
    if not subscription.unlimited_drivers and plan.max_drivers >= subscription.max_drivers:
        return

    driver_count = Driver.count_for_user(subscription.user_id)
    if driver_count > plan.max_drivers:
        logger.info(
            "Blocked downgrade of user %s to %s: %s drivers, limit %s",
            subscription.user_id, plan.id, driver_count, plan.max_drivers
        )
        raise DowngradeBlocked(plan.name, driver_count, plan.max_drivers, plan.id)


def change_plan(user_id, plan_id, catalog):
    """
    Switch the user's plan in place, keeping status and billing period.

    Args:
        user_id (int): User ID
        plan_id (str): Target plan id
        catalog (PlanCatalog): Plan definitions

    Returns:
        Subscription: The updated subscription

    Raises:
        InvalidPlan: If ``plan_id`` is unknown
        NoSubscription: If the user has no subscription
        DowngradeBlocked: If current drivers exceed the target quota
    """
    plan = catalog.get_plan(plan_id)
    subscription = get_subscription(user_id)
    ensure_driver_capacity(subscription, plan)

    previous = subscription.plan
    subscription.apply_plan(plan)
    db.session.commit()
    logger.info("User %s changed plan %s -> %s", user_id, previous, plan.id)
    return subscription


def activate_plan(user_id, plan_id, catalog, now=None):
    """
    Subscribe the user to a paid plan, starting a new one-month period.

    Creates the subscription when the user has none. A concurrent first
    access that wins the insert is updated in place instead.

    Args:
        user_id (int): User ID
        plan_id (str): Target plan id
        catalog (PlanCatalog): Plan definitions
        now (datetime, optional): Period start

    Returns:
        Subscription: The active subscription

    Raises:
        InvalidPlan: If ``plan_id`` is unknown
        DowngradeBlocked: If current drivers exceed the target quota
    """
    plan = catalog.get_plan(plan_id)
    now = now or utcnow()

    subscription = Subscription.get_for_user(user_id)
    if subscription is None:
        subscription = Subscription(
            user_id=user_id, plan=plan, current_period_start=now, current_period_end=now
        )
        db.session.add(subscription)
        try:
            db.session.flush()
        except IntegrityError:
            # A concurrent request created the row first; update that one
            db.session.rollback()
            logger.info("Subscription for user %s created concurrently, re-fetching", user_id)
            subscription = get_subscription(user_id)

    ensure_driver_capacity(subscription, plan)
    subscription.apply_plan(plan)
    subscription.activate(now)
    db.session.commit()
    logger.info(
        "User %s activated %s until %s", user_id, plan.id, subscription.current_period_end
    )
    return subscription


def schedule_cancellation(user_id):
    """
    Flag the subscription to lapse at the end of its period.

    Raises:
        NoSubscription: If the user has no subscription
    """
    subscription = get_subscription(user_id)
    subscription.schedule_cancellation()
    db.session.commit()
    logger.info(
        "User %s scheduled cancellation at %s", user_id, subscription.current_period_end
    )
    return subscription


def resume_subscription(user_id, now=None):
    """
    Undo a scheduled cancellation, reactivating a canceled or expired plan.

    Raises:
        NoSubscription: If the user has no subscription
    """
    subscription = get_subscription(user_id)
    previous_status = subscription.status
    subscription.resume(now)
    db.session.commit()
    logger.info(
        "User %s resumed subscription (%s -> %s)",
        user_id, previous_status, subscription.status
    )
    return subscription


def expire_if_due(subscription, now=None):
    """
    Persist the expired status once the billing period has ended.

    Returns:
        bool: True if the period has ended
    """
    if not subscription.is_past_period_end(now):
        return False
    if subscription.status != SubscriptionStatus.EXPIRED.value:
        subscription.expire()
        db.session.commit()
        logger.info("Subscription for user %s expired", subscription.user_id)
    return True


def display_max_drivers(subscription):
    return UNLIMITED if subscription.unlimited_drivers else subscription.max_drivers


def check_limits(user_id, catalog, now=None, trial_plan=DEFAULT_TRIAL_PLAN):
    """
    Quota and feature summary for banners.

    Provisions a trial when the user has no subscription yet.

    Returns:
        dict: plan, status, currentDrivers, maxDrivers, canAddDriver, features
    """
    subscription = get_or_create_subscription(user_id, catalog, now, trial_plan)
    driver_count = Driver.count_for_user(user_id)
    can_add = subscription.unlimited_drivers or driver_count < subscription.max_drivers

    return {
        'plan': subscription.plan,
        'status': subscription.status,
        'currentDrivers': driver_count,
        'maxDrivers': display_max_drivers(subscription),
        'canAddDriver': can_add,
        'features': subscription.features,
    }


def get_usage_stats(user_id, catalog, now=None, trial_plan=DEFAULT_TRIAL_PLAN):
    """
    Subscription period and driver usage for the billing dashboard.

    Provisions a trial when the user has no subscription yet. The usage
    percentage is not capped, so fleets over quota report more than 100.

    Returns:
        dict: subscription, usage and features sections
    """
    now = now or utcnow()
    subscription = get_or_create_subscription(user_id, catalog, now, trial_plan)

    total = Driver.count_for_user(user_id)
    if subscription.unlimited_drivers:
        usage_percentage = 0
    else:
        # max_drivers is never 0 for a limited plan
        usage_percentage = math.floor(total * 100 / subscription.max_drivers + 0.5)

    return {
        'subscription': {
            'plan': subscription.plan,
            'status': subscription.status,
            'currentPeriodEnd': subscription.current_period_end.isoformat(),
            'daysRemaining': days_until(subscription.current_period_end, now),
            'cancelAtPeriodEnd': subscription.cancel_at_period_end,
        },
        'usage': {
            'totalDrivers': total,
            'activeDrivers': Driver.count_for_user_by_status(user_id, DriverStatus.ACTIVE.value),
            'inactiveDrivers': Driver.count_for_user_by_status(user_id, DriverStatus.INACTIVE.value),
            'pendingDrivers': Driver.count_for_user_by_status(user_id, DriverStatus.PENDING.value),
            'maxDrivers': display_max_drivers(subscription),
            'usagePercentage': usage_percentage,
        },
        'features': subscription.features,
    }
