"""
Authentication routes.
"""
import logging

from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    current_user,
    get_jwt_identity,
    jwt_required,
)
from flask_restx import Resource, fields
from sqlalchemy.exc import IntegrityError

from fleetsub import db
from fleetsub.api import json_body
from fleetsub.errors import Conflict, NotFound, ValidationFailed
from fleetsub.models.driver import Driver
from fleetsub.models.user import User, UserRole
from fleetsub.utils.auth import admin_required, current_user_id

from . import auth_ns

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
STRING_FIELDS = ('email', 'password', 'name', 'currentPassword', 'newPassword')

register_model = auth_ns.model('AdminRegistration', {
    'email': fields.String(required=True, description='User email address'),
    'password': fields.String(required=True, description='User password'),
    'name': fields.String(description='Display name'),
})

login_model = auth_ns.model('UserLogin', {
    'email': fields.String(required=True, description='User email address'),
    'password': fields.String(required=True, description='User password'),
})

user_model = auth_ns.model('User', {
    'id': fields.Integer(description='User identifier'),
    'email': fields.String(description='User email address'),
    'name': fields.String(description='Display name'),
    'role': fields.String(description='User role', enum=[r.value for r in UserRole]),
    'isActive': fields.Boolean(attribute='is_active'),
    'driverId': fields.Integer(attribute='driver_id'),
    'createdAt': fields.DateTime(attribute='created_at'),
})

token_model = auth_ns.model('TokenResponse', {
    'access_token': fields.String(description='JWT access token'),
    'refresh_token': fields.String(description='JWT refresh token'),
    'user': fields.Nested(user_model),
})

driver_account_model = auth_ns.model('DriverAccount', {
    'driverId': fields.Integer(required=True, description='Driver to link the account to'),
    'email': fields.String(required=True, description='Login email'),
    'password': fields.String(required=True, description='Initial password'),
})

password_change_model = auth_ns.model('PasswordChange', {
    'currentPassword': fields.String(required=True),
    'newPassword': fields.String(required=True, min_length=MIN_PASSWORD_LENGTH),
})

password_changed_model = auth_ns.model('PasswordChanged', {
    'message': fields.String(),
    'access_token': fields.String(description='JWT access token'),
    'refresh_token': fields.String(description='JWT refresh token'),
})

refresh_token_model = auth_ns.model('RefreshToken', {
    'access_token': fields.String(description='New JWT access token')
})


def issue_tokens(user):
    """Access and refresh tokens for ``user``, carrying its role as a claim."""
    claims = {'role': user.role}
    return {
        'access_token': create_access_token(identity=str(user.id), additional_claims=claims),
        'refresh_token': create_refresh_token(identity=str(user.id), additional_claims=claims),
        'user': user,
    }


def require_text(data):
    if any(key in data and not isinstance(data[key], str) for key in STRING_FIELDS):
        raise ValidationFailed('Credentials must be text')


def validate_credentials(data, *required):
    if not all(data.get(key) for key in required):
        raise ValidationFailed('Missing required fields')
    require_text(data)
    if '@' not in data['email']:
        raise ValidationFailed('Invalid email format')
    if len(data['password']) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(
            f'Password must be at least {MIN_PASSWORD_LENGTH} characters long'
        )


def save_user(user):
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict('User account already exists for this email')
    return user


@auth_ns.route('/register-admin')
class AdminRegistration(Resource):
    """
    Admin registration endpoint.
    """
    @auth_ns.doc('register_admin', security=None)
    @auth_ns.expect(register_model)
    @auth_ns.marshal_with(token_model, code=201)
    @auth_ns.response(400, 'Validation error')
    @auth_ns.response(409, 'User already exists')
    def post(self):
        """
        Register a fleet admin account.
        """
        data = json_body()
        validate_credentials(data, 'email', 'password')

        user = save_user(User(
            email=data['email'],
            password=data['password'],
            name=data.get('name', ''),
            role=UserRole.ADMIN.value,
        ))
        logger.info("Registered admin %s", user.email)
        return issue_tokens(user), 201


@auth_ns.route('/login')
class UserLogin(Resource):
    """
    User login endpoint.
    """
    @auth_ns.doc('login_user', security=None)
    @auth_ns.expect(login_model)
    @auth_ns.marshal_with(token_model)
    @auth_ns.response(400, 'Validation error')
    @auth_ns.response(401, 'Invalid credentials')
    def post(self):
        """
        Authenticate a user and generate JWT tokens.
        """
        data = json_body()
        if not data.get('email') or not data.get('password'):
            raise ValidationFailed('Please provide email and password')
        require_text(data)

        user = User.query.filter_by(email=data['email'].strip().lower()).first()
        if not user or not user.check_password(data['password']):
            auth_ns.abort(401, 'Invalid email or password')
        if not user.is_active:
            auth_ns.abort(401, 'User account is deactivated')

        return issue_tokens(user)


@auth_ns.route('/refresh')
class TokenRefresh(Resource):
    """
    Token refresh endpoint.
    """
    @auth_ns.doc('refresh_token')
    @auth_ns.marshal_with(refresh_token_model)
    @jwt_required(refresh=True)
    def post(self):
        """
        Generate a new access token using a refresh token.
        """
        return {
            'access_token': create_access_token(
                identity=get_jwt_identity(),
                additional_claims={'role': current_user.role},
            )
        }


@auth_ns.route('/me')
class CurrentUser(Resource):
    """
    Current user endpoint.
    """
    @auth_ns.doc('get_me')
    @auth_ns.marshal_with(user_model)
    @jwt_required()
    def get(self):
        """
        Return the signed-in user.
        """
        return current_user


@auth_ns.route('/change-password')
class PasswordChange(Resource):
    """
    Password change endpoint.
    """
    @auth_ns.doc('change_password')
    @auth_ns.expect(password_change_model)
    @auth_ns.marshal_with(password_changed_model)
    @auth_ns.response(400, 'Validation error')
    @auth_ns.response(401, 'Current password is incorrect')
    @jwt_required()
    def put(self):
        """
        Replace the signed-in user's password and issue fresh tokens.
        """
        data = json_body()
        if not data.get('currentPassword') or not data.get('newPassword'):
            raise ValidationFailed('Please provide current and new password')
        require_text(data)
        if len(data['newPassword']) < MIN_PASSWORD_LENGTH:
            raise ValidationFailed(
                f'New password must be at least {MIN_PASSWORD_LENGTH} characters'
            )

        user = current_user
        if not user.check_password(data['currentPassword']):
            auth_ns.abort(401, 'Current password is incorrect')

        user.set_password(data['newPassword'])
        db.session.commit()
        logger.info("User %s changed password", user.email)

        tokens = issue_tokens(user)
        tokens['message'] = 'Password changed successfully'
        return tokens


@auth_ns.route('/create-driver-account')
class DriverAccount(Resource):
    """
    Driver account provisioning endpoint.
    """
    @auth_ns.doc('create_driver_account')
    @auth_ns.expect(driver_account_model)
    @auth_ns.marshal_with(user_model, code=201)
    @auth_ns.response(404, 'Driver not found')
    @auth_ns.response(409, 'Account already exists')
    @jwt_required()
    @admin_required()
    def post(self):
        """
        Create a login for one of the admin's drivers.
        """
        data = json_body()
        validate_credentials(data, 'driverId', 'email', 'password')
        if not isinstance(data['driverId'], int) or isinstance(data['driverId'], bool):
            raise ValidationFailed('driverId must be an integer')

        driver = db.session.get(Driver, data['driverId'])
        if driver is None or driver.user_id != current_user_id():
            raise NotFound('Driver not found')
        if User.query.filter_by(driver_id=driver.id).first():
            raise Conflict('User account already exists for this driver')

        user = save_user(User(
            email=data['email'],
            password=data['password'],
            name=driver.name,
            role=UserRole.DRIVER.value,
            driver_id=driver.id,
        ))
        logger.info("Created driver account %s for driver %s", user.email, driver.id)
        return user, 201


def _set_active(user_id, is_active):
    """Toggle sign-in for a driver account belonging to the caller's fleet."""
    user = db.session.get(User, user_id)
    if user is None or user.driver is None or user.driver.user_id != current_user_id():
        raise NotFound('User not found')
    user.is_active = is_active
    db.session.commit()
    logger.info("User %s %s", user.email, "activated" if is_active else "deactivated")
    return user


@auth_ns.route('/deactivate/<int:user_id>')
@auth_ns.param('user_id', 'The user identifier')
class UserDeactivation(Resource):
    """Disable sign-in for one of the fleet's driver accounts (admin only)"""

    @auth_ns.doc('deactivate_user')
    @auth_ns.marshal_with(user_model)
    @auth_ns.response(404, 'User not found in this fleet')
    @jwt_required()
    @admin_required()
    def put(self, user_id):
        """Deactivate a user"""
        return _set_active(user_id, False)


@auth_ns.route('/activate/<int:user_id>')
@auth_ns.param('user_id', 'The user identifier')
class UserActivation(Resource):
    """Re-enable sign-in for one of the fleet's driver accounts (admin only)"""

    @auth_ns.doc('activate_user')
    @auth_ns.marshal_with(user_model)
    @auth_ns.response(404, 'User not found in this fleet')
    @jwt_required()
    @admin_required()
    def put(self, user_id):
        """Activate a user"""
        return _set_active(user_id, True)
