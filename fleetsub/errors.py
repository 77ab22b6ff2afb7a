"""
API error types and their JSON rendering.

Every error renders as ``{"message": ..., "code": ..., **payload}`` so
clients can branch on ``code`` and show ``message`` verbatim.
"""
import logging
from http import HTTPStatus

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = HTTPStatus.BAD_REQUEST
    code = "API_ERROR"
    default_message = "Request could not be processed"

    def __init__(self, message=None, status_code=None, **payload):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        data = {'message': self.message, 'code': self.code}
        data.update(self.payload)
        return data


class InvalidPlan(ApiError):
    code = "INVALID_PLAN"
    default_message = "Invalid plan"

    def __init__(self, plan_id=None):
        super().__init__(plan=plan_id)


class NoSubscription(ApiError):
    status_code = HTTPStatus.NOT_FOUND
    code = "NO_SUBSCRIPTION"
    default_message = "Subscription not found"


class SubscriptionInactive(ApiError):
    status_code = HTTPStatus.FORBIDDEN
    code = "SUBSCRIPTION_INACTIVE"
    default_message = "Your subscription is not active. Please update your payment method."

    def __init__(self, status):
        super().__init__(status=status)


class SubscriptionExpired(ApiError):
    status_code = HTTPStatus.FORBIDDEN
    code = "SUBSCRIPTION_EXPIRED"
    default_message = "Your subscription has expired. Please renew to continue."

    def __init__(self, status):
        super().__init__(status=status)


class DriverLimitReached(ApiError):
    status_code = HTTPStatus.FORBIDDEN
    code = "DRIVER_LIMIT_REACHED"

    def __init__(self, current_count, max_drivers, plan):
        super().__init__(
            f"Driver limit reached. Your {plan} plan allows {max_drivers} drivers. "
            f"Upgrade to add more.",
            currentCount=current_count,
            maxDrivers=max_drivers,
            plan=plan,
        )


class DowngradeBlocked(ApiError):
    code = "DOWNGRADE_BLOCKED"

    def __init__(self, plan_name, current_count, max_drivers, plan):
        to_remove = current_count - max_drivers
        super().__init__(
            f"Cannot downgrade to {plan_name} plan. You have {current_count} drivers "
            f"but this plan only allows {max_drivers}. "
            f"Please remove {to_remove} driver(s) first.",
            driversToRemove=to_remove,
            currentCount=current_count,
            maxDrivers=max_drivers,
            plan=plan,
        )


class FeatureNotAvailable(ApiError):
    status_code = HTTPStatus.FORBIDDEN
    code = "FEATURE_NOT_AVAILABLE"

    def __init__(self, feature, plan):
        super().__init__(
            f"This feature requires a higher plan. Your current plan is {plan}.",
            feature=feature,
            plan=plan,
        )


class ValidationFailed(ApiError):
    code = "VALIDATION_FAILED"
    default_message = "Validation failed"


class Forbidden(ApiError):
    status_code = HTTPStatus.FORBIDDEN
    code = "FORBIDDEN"
    default_message = "You do not have permission to perform this action"


class NotFound(ApiError):
    status_code = HTTPStatus.NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(ApiError):
    status_code = HTTPStatus.CONFLICT
    code = "CONFLICT"
    default_message = "Resource already exists"


def register_error_handlers(api):
    """Attach the JSON error handlers to a Flask-RESTX ``Api``."""
    from fleetsub import db

    @api.errorhandler(ApiError)
    def handle_api_error(error):
        return error.to_dict(), int(error.status_code)

    @api.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.error("Database error: %s", error)
        return {'message': str(error)}, HTTPStatus.INTERNAL_SERVER_ERROR
