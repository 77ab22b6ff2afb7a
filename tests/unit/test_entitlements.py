"""
Unit tests for the entitlement gate decorators.
"""
from datetime import timedelta

import pytest
from flask import g
from flask_jwt_extended import verify_jwt_in_request

from fleetsub.errors import (
    DriverLimitReached,
    FeatureNotAvailable,
    NoSubscription,
    SubscriptionExpired,
    SubscriptionInactive,
)
from fleetsub.models.base import utcnow
from fleetsub.models.subscription import Subscription, SubscriptionStatus
from fleetsub.utils.entitlements import (
    check_driver_limit,
    require_active_subscription,
    require_feature,
)


@pytest.fixture
def gated(app, auth_headers):
    """Run a gated callable inside a request authenticated as ``user``."""
    def _gated(decorator, user):
        @decorator
        def view():
            return 'ok'

        with app.test_request_context(headers=auth_headers(user)):
            verify_jwt_in_request()
            return view()

    return _gated


class TestRequireActiveSubscription:

    def test_provisions_trial_for_new_user(self, db, admin, gated):
        assert gated(require_active_subscription(), admin) == 'ok'

        subscription = Subscription.get_for_user(admin.id)
        assert subscription.status == SubscriptionStatus.TRIALING.value

    @pytest.mark.parametrize("status", ["canceled", "past_due", "expired"])
    def test_refuses_inactive_status(self, db, admin, make_subscription, gated, status):
        make_subscription(admin, status=status)

        with pytest.raises(SubscriptionInactive) as excinfo:
            gated(require_active_subscription(), admin)
        assert excinfo.value.payload['status'] == status

    @pytest.mark.parametrize("status", ["active", "trialing"])
    def test_expires_stale_period(self, db, admin, make_subscription, gated, status):
        make_subscription(admin, status=status, period_end=utcnow() - timedelta(minutes=5))

        with pytest.raises(SubscriptionExpired):
            gated(require_active_subscription(), admin)

        db.session.expire_all()
        assert Subscription.get_for_user(admin.id).status == SubscriptionStatus.EXPIRED.value

    def test_admits_active_subscription(self, db, admin, make_subscription, gated):
        make_subscription(admin, plan_id='professional')
        assert gated(require_active_subscription(), admin) == 'ok'

    def test_exposes_loaded_subscription(self, app, db, admin, make_subscription, auth_headers):
        subscription = make_subscription(admin, plan_id='professional')

        @require_active_subscription()
        def view():
            return g.subscription

        with app.test_request_context(headers=auth_headers(admin)):
            verify_jwt_in_request()
            loaded = view()

        assert loaded is subscription
        assert loaded is Subscription.get_for_user(admin.id)


class TestCheckDriverLimit:

    def test_requires_subscription(self, db, admin, gated):
        with pytest.raises(NoSubscription) as excinfo:
            gated(check_driver_limit(), admin)
        assert excinfo.value.status_code == 403
        assert Subscription.get_for_user(admin.id) is None

    def test_below_limit(self, db, admin, make_subscription, make_drivers, gated):
        make_subscription(admin, plan_id='starter')
        make_drivers(admin, 24)
        assert gated(check_driver_limit(), admin) == 'ok'

    def test_at_limit(self, db, admin, make_subscription, make_drivers, gated):
        make_subscription(admin, plan_id='professional')
        make_drivers(admin, 100)

        with pytest.raises(DriverLimitReached) as excinfo:
            gated(check_driver_limit(), admin)
        assert excinfo.value.payload == {
            'currentCount': 100, 'maxDrivers': 100, 'plan': 'professional'
        }

    def test_unlimited(self, db, admin, make_subscription, make_drivers, gated):
        make_subscription(admin, plan_id='enterprise')
        make_drivers(admin, 150)
        assert gated(check_driver_limit(), admin) == 'ok'

    def test_counts_only_own_drivers(self, db, admin, make_user, make_subscription,
                                     make_drivers, gated):
        other = make_user()
        make_subscription(admin, plan_id='starter')
        make_drivers(other, 30)
        assert gated(check_driver_limit(), admin) == 'ok'


class TestRequireFeature:

    def test_requires_subscription(self, db, admin, gated):
        with pytest.raises(NoSubscription) as excinfo:
            gated(require_feature('advancedAnalytics'), admin)
        assert excinfo.value.status_code == 403

    def test_feature_missing(self, db, admin, make_subscription, gated):
        make_subscription(admin, plan_id='starter')

        with pytest.raises(FeatureNotAvailable) as excinfo:
            gated(require_feature('advancedAnalytics'), admin)
        assert excinfo.value.to_dict()['code'] == 'FEATURE_NOT_AVAILABLE'
        assert excinfo.value.payload['feature'] == 'advancedAnalytics'

    def test_feature_present(self, db, admin, make_subscription, gated):
        make_subscription(admin, plan_id='professional')
        assert gated(require_feature('advancedAnalytics'), admin) == 'ok'

    def test_unknown_feature_refused(self, db, admin, make_subscription, gated):
        make_subscription(admin, plan_id='enterprise')
        with pytest.raises(FeatureNotAvailable):
            gated(require_feature('teleportation'), admin)
