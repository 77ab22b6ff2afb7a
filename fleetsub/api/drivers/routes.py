"""
Routes for driver records and fleet reporting.
"""
import logging
from datetime import datetime, time, timedelta

from flask import request
from flask_jwt_extended import current_user, jwt_required
from flask_restx import Resource, fields
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from fleetsub import db
from fleetsub.api import json_body
from fleetsub.errors import Conflict, Forbidden, NotFound, ValidationFailed
from fleetsub.models.base import utcnow
from fleetsub.models.driver import Driver, DriverStatus, LicenseClass
from fleetsub.utils.auth import admin_required, current_user_id
from fleetsub.utils.entitlements import (
    check_driver_limit,
    require_active_subscription,
    require_feature,
)

from . import driver_ns
from .validation import parse_date, parse_driver_payload

logger = logging.getLogger(__name__)

CALENDAR_DEFAULT_DAYS = 90
EXPIRING_SOON_DAYS = 30
REGISTRATION_MONTHS = 10
TIMELINE_MONTHS = 6
ACTIVITY_DEFAULT_LIMIT = 10
ACTIVITY_MAX_LIMIT = 50

driver_model = driver_ns.model('Driver', {
    'id': fields.Integer(description='Driver ID'),
    'userId': fields.Integer(attribute='user_id', description='Owning fleet account'),
    'name': fields.String(required=True),
    'email': fields.String(required=True),
    'phone': fields.String(required=True),
    'dateOfBirth': fields.Date(attribute='date_of_birth', required=True),
    'address': fields.String(),
    'city': fields.String(),
    'state': fields.String(),
    'zipCode': fields.String(attribute='zip_code'),
    'licenseNumber': fields.String(attribute='license_number', required=True),
    'licenseExpiry': fields.Date(attribute='license_expiry', required=True),
    'licenseClass': fields.String(attribute='license_class',
                                  enum=[c.value for c in LicenseClass]),
    'status': fields.String(enum=[s.value for s in DriverStatus]),
    'isLicenseExpired': fields.Boolean(attribute='is_license_expired'),
    'createdAt': fields.DateTime(attribute='created_at'),
    'updatedAt': fields.DateTime(attribute='updated_at'),
})

driver_list_model = driver_ns.model('DriverList', {
    'drivers': fields.List(fields.Nested(driver_model)),
    'total': fields.Integer(description='Total number of drivers'),
    'page': fields.Integer(description='Current page number'),
    'per_page': fields.Integer(description='Items per page'),
    'pages': fields.Integer(description='Total number of pages'),
})

calendar_model = driver_ns.model('LicenseCalendar', {
    'start': fields.Date(),
    'end': fields.Date(),
    'drivers': fields.List(fields.Nested(driver_model)),
})

activity_model = driver_ns.model('DriverActivity', {
    'type': fields.String(enum=['created', 'updated', 'expiring', 'deactivated']),
    'driverId': fields.Integer(),
    'driverName': fields.String(),
    'timestamp': fields.DateTime(),
    'status': fields.String(),
    'licenseExpiry': fields.Date(),
})


def get_accessible_driver(driver_id):
    """
    Load a driver the caller may see: its owning admin or its own account.

    Raises:
        NotFound: If the driver does not exist or belongs to another fleet
        Forbidden: If a driver account asks for someone else's record
    """
    driver = db.session.get(Driver, driver_id)
    if current_user.is_admin:
        if driver is None or driver.user_id != current_user.id:
            raise NotFound('Driver not found')
        return driver
    if current_user.driver_id != driver_id:
        raise Forbidden('You can only access your own information')
    if driver is None:
        raise NotFound('Driver not found')
    return driver


def commit_driver():
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict('A driver with this email or license number already exists')


@driver_ns.route('')
class DriverList(Resource):
    """Resource for listing and creating drivers"""

    @driver_ns.doc('list_drivers', params={
        'page': {'type': 'integer', 'default': 1, 'description': 'Page number'},
        'per_page': {'type': 'integer', 'default': 10, 'description': 'Items per page'},
        'status': {'type': 'string', 'description': 'Filter by status (active, inactive, pending)'},
        'search': {'type': 'string', 'description': 'Match name, email or license number'},
    })
    @driver_ns.marshal_with(driver_list_model)
    @jwt_required()
    @admin_required()
    @require_active_subscription()
    def get(self):
        """List the fleet's drivers"""
        page = request.args.get('page', 1, type=int)
        per_page = min(request.args.get('per_page', 10, type=int), 100)
        status = request.args.get('status')
        search = request.args.get('search')

        query = Driver.query.filter(Driver.user_id == current_user_id())
        if status and status != 'all':
            query = query.filter(Driver.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Driver.name.ilike(pattern),
                Driver.email.ilike(pattern),
                Driver.license_number.ilike(pattern),
            ))

        pagination = query.order_by(Driver.created_at.desc(), Driver.id.desc()).paginate(
            page=page, per_page=per_page, error_out=False
        )
        return {
            'drivers': pagination.items,
            'total': pagination.total,
            'page': pagination.page,
            'per_page': pagination.per_page,
            'pages': pagination.pages,
        }

    @driver_ns.doc('create_driver')
    @driver_ns.expect(driver_model)
    @driver_ns.marshal_with(driver_model, code=201)
    @driver_ns.response(400, 'Validation error')
    @driver_ns.response(403, 'Subscription inactive or driver limit reached')
    @driver_ns.response(409, 'Duplicate email or license number')
    @jwt_required()
    @admin_required()
    @require_active_subscription()
    @check_driver_limit()
    def post(self):
        """Add a driver to the fleet"""
        values = parse_driver_payload(json_body())
        driver = Driver(user_id=current_user_id(), **values)
        db.session.add(driver)
        commit_driver()
        logger.info("User %s added driver %s", driver.user_id, driver.id)
        return driver, 201


@driver_ns.route('/<int:id>')
@driver_ns.param('id', 'The driver identifier')
class DriverResource(Resource):
    """Resource for individual driver operations"""

    @driver_ns.doc('get_driver')
    @driver_ns.marshal_with(driver_model)
    @jwt_required()
    def get(self, id):
        """Get a driver (owning admin or the driver's own account)"""
        return get_accessible_driver(id)

    @driver_ns.doc('update_driver')
    @driver_ns.expect(driver_model)
    @driver_ns.marshal_with(driver_model)
    @jwt_required()
    def put(self, id):
        """Update a driver (owning admin or the driver's own account)"""
        driver = get_accessible_driver(id)
        values = parse_driver_payload(json_body(), partial=True)
        for attribute, value in values.items():
            setattr(driver, attribute, value)
        commit_driver()
        return driver

    @driver_ns.doc('delete_driver')
    @driver_ns.response(204, 'Driver deleted')
    @jwt_required()
    @admin_required()
    def delete(self, id):
        """Remove a driver from the fleet (admin only)"""
        driver = get_accessible_driver(id)
        db.session.delete(driver)
        db.session.commit()
        logger.info("User %s removed driver %s", current_user_id(), id)
        return '', 204


@driver_ns.route('/stats')
class DriverStats(Resource):
    """Resource for fleet headline numbers"""

    @driver_ns.doc('get_driver_stats')
    @jwt_required()
    @admin_required()
    @require_active_subscription()
    def get(self):
        """Driver counts by status and license health"""
        user_id = current_user_id()
        by_status = Driver.counts_by_status(user_id)
        return {
            'total': sum(by_status.values()),
            'byStatus': by_status,
            'expiredLicenses': Driver.expired_license_count(user_id),
            'expiringSoon': Driver.expiring_license_count(user_id, days=EXPIRING_SOON_DAYS),
        }


@driver_ns.route('/analytics')
class DriverAnalytics(Resource):
    """Resource for fleet breakdowns on plans with advanced analytics"""

    @driver_ns.doc('get_driver_analytics')
    @driver_ns.response(403, 'Feature not available on the current plan')
    @jwt_required()
    @admin_required()
    @require_active_subscription()
    @require_feature('advancedAnalytics')
    def get(self):
        """Registration trend, license expirations and fleet breakdowns"""
        user_id = current_user_id()
        return {
            'monthlyRegistrations': Driver.monthly_registrations(
                user_id, months=REGISTRATION_MONTHS
            ),
            'expirationTimeline': Driver.expiration_timeline(user_id, months=TIMELINE_MONTHS),
            'licenseClassDistribution': Driver.counts_by_column(user_id, Driver.license_class),
            'stateDistribution': Driver.counts_by_column(user_id, Driver.state),
            'statusDistribution': Driver.counts_by_status(user_id),
        }


def build_activity_feed(user_id, limit):
    """
    Merge recent roster events into one feed, newest first.

    A driver can appear more than once, e.g. as both updated and deactivated.
    Expiring licenses are placed at their expiry date.
    """
    activities = []
    for driver in Driver.recently_created(user_id, limit):
        activities.append(('created', driver, driver.created_at))
    for driver in Driver.recently_updated(user_id, limit):
        activities.append(('updated', driver, driver.updated_at))
    for driver in Driver.active_licenses_expiring(user_id, limit, days=EXPIRING_SOON_DAYS):
        activities.append(
            ('expiring', driver, datetime.combine(driver.license_expiry, time.min))
        )
    for driver in Driver.recently_deactivated(user_id, limit):
        activities.append(('deactivated', driver, driver.updated_at))

    activities.sort(key=lambda activity: activity[2], reverse=True)
    return [
        {
            'type': kind,
            'driverId': driver.id,
            'driverName': driver.name,
            'timestamp': timestamp,
            'status': driver.status,
            'licenseExpiry': driver.license_expiry if kind == 'expiring' else None,
        }
        for kind, driver, timestamp in activities[:limit]
    ]


@driver_ns.route('/activities')
class DriverActivities(Resource):
    """Resource for the recent activity feed"""

    @driver_ns.doc('get_driver_activities', params={
        'limit': {'type': 'integer', 'default': ACTIVITY_DEFAULT_LIMIT,
                  'description': 'Maximum number of events'},
    })
    @driver_ns.marshal_list_with(activity_model)
    @jwt_required()
    @admin_required()
    @require_active_subscription()
    def get(self):
        """Recently created, updated, expiring and deactivated drivers"""
        limit = request.args.get('limit', ACTIVITY_DEFAULT_LIMIT, type=int)
        if limit < 1:
            limit = ACTIVITY_DEFAULT_LIMIT
        return build_activity_feed(current_user_id(), min(limit, ACTIVITY_MAX_LIMIT))


@driver_ns.route('/license-calendar')
class LicenseCalendar(Resource):
    """Resource for upcoming license expirations"""

    @driver_ns.doc('get_license_calendar', params={
        'start': {'type': 'string', 'description': 'First day (YYYY-MM-DD), default today'},
        'end': {'type': 'string', 'description': 'Last day (YYYY-MM-DD), default start + 90 days'},
    })
    @driver_ns.marshal_with(calendar_model)
    @jwt_required()
    @admin_required()
    @require_active_subscription()
    def get(self):
        """Drivers whose license expires within a date window"""
        start = parse_date(request.args['start']) if 'start' in request.args else utcnow().date()
        if start is None:
            raise ValidationFailed('start must be a valid date')
        if 'end' in request.args:
            end = parse_date(request.args['end'])
            if end is None:
                raise ValidationFailed('end must be a valid date')
        else:
            end = start + timedelta(days=CALENDAR_DEFAULT_DAYS)
        if end < start:
            raise ValidationFailed('end must not be before start')

        return {
            'start': start,
            'end': end,
            'drivers': Driver.licenses_expiring_between(current_user_id(), start, end),
        }
