"""
Authentication utilities and decorators.
"""
from functools import wraps

from flask_jwt_extended import get_jwt, get_jwt_identity

from fleetsub.errors import Forbidden


def current_user_id():
    """User ID carried by the verified access token."""
    return int(get_jwt_identity())


def roles_required(*roles):
    """
    Decorator to restrict a route to the given roles.
    Must be used after jwt_required() decorator.

    Returns:
        function: Decorator function
    """
    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            role = get_jwt().get('role')
            if role not in roles:
                raise Forbidden()
            return fn(*args, **kwargs)
        return decorator
    return wrapper


def admin_required():
    """Decorator to check if the current user has admin privileges."""
    return roles_required('admin')
