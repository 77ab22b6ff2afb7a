"""
Subscription model tracking each user's plan, status and billing period.
"""
from datetime import timedelta
from enum import Enum

from sqlalchemy import Index

from fleetsub import db
from fleetsub.utils.dates import add_months

from .base import BaseModel, utcnow


class SubscriptionStatus(Enum):
    """Enum for subscription status values."""
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    EXPIRED = "expired"


ENTITLED_STATUSES = (SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIALING.value)
REACTIVATABLE_STATUSES = (SubscriptionStatus.CANCELED.value, SubscriptionStatus.EXPIRED.value)


class Subscription(BaseModel):
    """
    A user's plan assignment and billing period. One row per user.

    Attributes:
        user_id (int): Owning user (unique)
        plan (str): Current plan id
        status (str): Current status of the subscription
        current_period_start (datetime): Start of current billing period
        current_period_end (datetime): End of current billing period
        trial_end (datetime): End of the initial trial, if still trialing
        cancel_at_period_end (bool): Whether to cancel at period end
        max_drivers (int): Driver quota copied from the plan when selected
        features (dict): Feature bundle copied from the plan when selected
        billing_customer_id, billing_subscription_id, billing_price_id,
        payment_method (str): Reserved for an external billing provider
    """
    __tablename__ = 'subscriptions'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)
    plan = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=SubscriptionStatus.TRIALING.value)
    current_period_start = db.Column(db.DateTime, nullable=False, default=utcnow)
    current_period_end = db.Column(db.DateTime, nullable=False)
    trial_end = db.Column(db.DateTime, nullable=True)
    cancel_at_period_end = db.Column(db.Boolean, nullable=False, default=False)
    max_drivers = db.Column(db.Integer, nullable=False)
    features = db.Column(db.JSON, nullable=False)
    billing_customer_id = db.Column(db.String(255), nullable=True)
    billing_subscription_id = db.Column(db.String(255), nullable=True)
    billing_price_id = db.Column(db.String(255), nullable=True)
    payment_method = db.Column(db.String(255), nullable=True)

    # Relationships
    user = db.relationship('User', back_populates='subscription')

    __table_args__ = (
        Index('idx_subscription_status', 'status'),
        Index('idx_subscription_period_end', 'current_period_end'),
    )

    def __init__(self, user_id, plan, current_period_end,
                 status=SubscriptionStatus.TRIALING.value, current_period_start=None,
                 trial_end=None, cancel_at_period_end=False):
        """
        Initialize a new Subscription instance.

        Args:
            user_id (int): User ID
            plan (Plan): Plan whose quota and features are copied
            current_period_end (datetime): Current billing period end
            status (str, optional): Subscription status
            current_period_start (datetime, optional): Current billing period start
            trial_end (datetime, optional): Trial end date
            cancel_at_period_end (bool, optional): Whether to cancel at period end
        """
        self.user_id = user_id
        self.status = status
        self.current_period_start = current_period_start or utcnow()
        self.current_period_end = current_period_end
        self.trial_end = trial_end
        self.apply_plan(plan)
        self.cancel_at_period_end = cancel_at_period_end

    @classmethod
    def start_trial(cls, user_id, plan, now=None):
        """
        Build a trialing subscription on ``plan`` starting at ``now``.

        Args:
            user_id (int): User ID
            plan (Plan): Trial plan
            now (datetime, optional): Trial start

        Returns:
            Subscription: The unsaved subscription
        """
        now = now or utcnow()
        trial_end = now + timedelta(days=plan.trial_days)
        return cls(
            user_id=user_id,
            plan=plan,
            status=SubscriptionStatus.TRIALING.value,
            current_period_start=now,
            current_period_end=trial_end,
            trial_end=trial_end,
        )

    @classmethod
    def get_for_user(cls, user_id):
        return cls.query.filter_by(user_id=user_id).first()

    @property
    def is_entitled(self):
        """True while the status grants access (active or trialing)."""
        return self.status in ENTITLED_STATUSES

    @property
    def unlimited_drivers(self):
        return bool((self.features or {}).get('unlimitedDrivers'))

    def has_feature(self, feature_name):
        return bool((self.features or {}).get(feature_name))

    def is_past_period_end(self, now=None):
        return (now or utcnow()) > self.current_period_end

    def apply_plan(self, plan):
        """
        Copy a plan's quota and feature bundle onto the subscription.

        The copy is not refreshed if the catalog changes later; only another
        explicit plan selection updates it.

        Args:
            plan (Plan): Selected plan

        Returns:
            Subscription: The subscription instance
        """
        self.plan = plan.id
        self.max_drivers = plan.max_drivers
        self.features = plan.features.to_dict()
        self.cancel_at_period_end = False
        return self

    def activate(self, now=None):
        """Start a fresh one-month paid period."""
        now = now or utcnow()
        self.status = SubscriptionStatus.ACTIVE.value
        self.current_period_start = now
        self.current_period_end = add_months(now, 1)
        self.trial_end = None
        return self

    def schedule_cancellation(self):
        """Flag the subscription to lapse at period end; status is untouched."""
        self.cancel_at_period_end = True
        return self

    def resume(self, now=None):
        """
        Clear a scheduled cancellation, reactivating a lapsed subscription.

        Returns:
            Subscription: The subscription instance
        """
        self.cancel_at_period_end = False
        if self.status in REACTIVATABLE_STATUSES:
            self.status = SubscriptionStatus.ACTIVE.value
            self.current_period_end = add_months(now or utcnow(), 1)
        return self

    def expire(self):
        """Mark the subscription as expired."""
        self.status = SubscriptionStatus.EXPIRED.value
        return self

    def __repr__(self):
        """String representation of the Subscription model."""
        return f"<Subscription User:{self.user_id} Plan:{self.plan} Status:{self.status}>"
