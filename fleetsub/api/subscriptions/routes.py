"""
Routes for the plan catalog and the current user's subscription.
"""
from flask import current_app
from flask_jwt_extended import jwt_required
from flask_restx import Resource, fields

from fleetsub.api import json_body
from fleetsub.models.plan import get_plan_catalog
from fleetsub.models.subscription import SubscriptionStatus
from fleetsub.services import subscription_service
from fleetsub.utils.auth import current_user_id

from . import plan_ns, subscription_ns

features_model = plan_ns.model('PlanFeatures', {
    'maxDrivers': fields.Integer(description='Driver quota (ignored when unlimited)'),
    'advancedAnalytics': fields.Boolean(),
    'apiAccess': fields.Boolean(),
    'customReports': fields.Boolean(),
    'prioritySupport': fields.Boolean(),
    'unlimitedDrivers': fields.Boolean(),
    'customIntegrations': fields.Boolean(),
    'dedicatedSupport': fields.Boolean(),
    'slaGuarantee': fields.Boolean(),
})

plan_model = plan_ns.model('Plan', {
    'id': fields.String(description='Plan identifier', enum=['starter', 'professional', 'enterprise']),
    'name': fields.String(description='Plan name'),
    'description': fields.String(description='Plan description'),
    'price': fields.Integer(description='Monthly price'),
    'trialDays': fields.Integer(attribute='trial_days', description='Trial length in days'),
    'features': fields.Nested(features_model),
})

subscription_model = subscription_ns.model('Subscription', {
    'id': fields.Integer(description='Subscription ID'),
    'user': fields.Integer(attribute='user_id', description='Owning user ID'),
    'plan': fields.String(description='Current plan id'),
    'status': fields.String(description='Subscription status',
                            enum=[s.value for s in SubscriptionStatus]),
    'currentPeriodStart': fields.DateTime(attribute='current_period_start'),
    'currentPeriodEnd': fields.DateTime(attribute='current_period_end'),
    'trialEnd': fields.DateTime(attribute='trial_end'),
    'cancelAtPeriodEnd': fields.Boolean(attribute='cancel_at_period_end'),
    'maxDrivers': fields.Integer(attribute='max_drivers'),
    'features': fields.Raw(description='Feature bundle copied from the plan'),
    'createdAt': fields.DateTime(attribute='created_at'),
    'updatedAt': fields.DateTime(attribute='updated_at'),
})

subscription_message_model = subscription_ns.model('SubscriptionMessage', {
    'message': fields.String(),
    'subscription': fields.Nested(subscription_model),
})

plan_choice_model = subscription_ns.model('PlanChoice', {
    'plan': fields.String(required=True, description='Plan id to switch to',
                          enum=['starter', 'professional', 'enterprise']),
})

limits_model = subscription_ns.model('SubscriptionLimits', {
    'plan': fields.String(),
    'status': fields.String(),
    'currentDrivers': fields.Integer(),
    'maxDrivers': fields.Raw(description='Driver quota or "Unlimited"'),
    'canAddDriver': fields.Boolean(),
    'features': fields.Raw(),
})


def _requested_plan():
    return json_body().get('plan')


def _trial_plan():
    return current_app.config.get('DEFAULT_PLAN', 'starter')


def _cache(key):
    return {'Cache-Control': current_app.config[key]}


@plan_ns.route('')
class PlanList(Resource):
    """Resource for the public plan catalog"""

    @plan_ns.doc('list_plans', security=None)
    @plan_ns.marshal_list_with(plan_model)
    def get(self):
        """List all subscription plans"""
        return get_plan_catalog().list_plans(), 200, _cache('PLANS_CACHE_CONTROL')


@subscription_ns.route('')
class CurrentSubscription(Resource):
    """Resource for the caller's subscription"""

    @subscription_ns.doc('get_subscription')
    @subscription_ns.marshal_with(subscription_model)
    @jwt_required()
    def get(self):
        """Get the current subscription, starting a trial if there is none"""
        subscription = subscription_service.get_or_create_subscription(
            current_user_id(), get_plan_catalog(), trial_plan=_trial_plan()
        )
        return subscription, 200, _cache('SUBSCRIPTION_CACHE_CONTROL')

    @subscription_ns.doc('activate_subscription')
    @subscription_ns.expect(plan_choice_model)
    @subscription_ns.marshal_with(subscription_model)
    @subscription_ns.response(400, 'Invalid plan or too many drivers for the plan')
    @jwt_required()
    def post(self):
        """Subscribe to a plan, starting a new billing month"""
        return subscription_service.activate_plan(
            current_user_id(), _requested_plan(), get_plan_catalog()
        )

    @subscription_ns.doc('change_subscription_plan')
    @subscription_ns.expect(plan_choice_model)
    @subscription_ns.marshal_with(subscription_model)
    @subscription_ns.response(400, 'Invalid plan or too many drivers for the plan')
    @subscription_ns.response(404, 'Subscription not found')
    @jwt_required()
    def patch(self):
        """Change plan without touching the billing period"""
        return subscription_service.change_plan(
            current_user_id(), _requested_plan(), get_plan_catalog()
        )


@subscription_ns.route('/cancel')
class SubscriptionCancel(Resource):
    """Resource for scheduling cancellation"""

    @subscription_ns.doc('cancel_subscription')
    @subscription_ns.marshal_with(subscription_message_model)
    @subscription_ns.response(404, 'Subscription not found')
    @jwt_required()
    def post(self):
        """Cancel at the end of the current billing period"""
        subscription = subscription_service.schedule_cancellation(current_user_id())
        return {
            'message': 'Subscription will be canceled at the end of the billing period',
            'subscription': subscription,
        }


@subscription_ns.route('/resume')
class SubscriptionResume(Resource):
    """Resource for undoing a cancellation"""

    @subscription_ns.doc('resume_subscription')
    @subscription_ns.marshal_with(subscription_message_model)
    @subscription_ns.response(404, 'Subscription not found')
    @jwt_required()
    def post(self):
        """Resume a canceled or expired subscription"""
        subscription = subscription_service.resume_subscription(current_user_id())
        return {
            'message': 'Subscription resumed successfully',
            'subscription': subscription,
        }


@subscription_ns.route('/limits')
class SubscriptionLimits(Resource):
    """Resource for quota banner data"""

    @subscription_ns.doc('get_subscription_limits')
    @subscription_ns.marshal_with(limits_model)
    @jwt_required()
    def get(self):
        """Driver quota and feature flags"""
        limits = subscription_service.check_limits(
            current_user_id(), get_plan_catalog(), trial_plan=_trial_plan()
        )
        return limits, 200, _cache('LIMITS_CACHE_CONTROL')


@subscription_ns.route('/usage')
class SubscriptionUsage(Resource):
    """Resource for the usage dashboard"""

    @subscription_ns.doc('get_subscription_usage')
    @jwt_required()
    def get(self):
        """Billing period and driver usage"""
        usage = subscription_service.get_usage_stats(
            current_user_id(), get_plan_catalog(), trial_plan=_trial_plan()
        )
        return usage, 200, _cache('USAGE_CACHE_CONTROL')
