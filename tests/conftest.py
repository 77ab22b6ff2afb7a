"""
Pytest configuration and fixtures.
"""
import os
from datetime import date, timedelta

import pytest
from flask_jwt_extended import create_access_token

from fleetsub import create_app
from fleetsub.models.base import utcnow
from fleetsub.models.driver import Driver, DriverStatus
from fleetsub.models.subscription import Subscription, SubscriptionStatus
from fleetsub.models.user import User, UserRole


@pytest.fixture(scope="function")
def app():
    """
    Create a Flask application configured for testing.

    Each test gets a fresh in-memory database.

    Returns:
        Flask: The Flask application instance.
    """
    os.environ["FLASK_ENV"] = "testing"
    app = create_app("testing")

    with app.app_context():
        from fleetsub import db

        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    """
    Create a test client for the Flask application.

    Returns:
        FlaskClient: A test client for the Flask application.
    """
    return app.test_client()


@pytest.fixture(scope="function")
def db(app):
    """
    Fixture for the SQLAlchemy database object.

    Returns:
        SQLAlchemy db: The database object for testing.
    """
    from fleetsub import db as _db
    return _db


@pytest.fixture
def catalog(app):
    """The plan catalog built by the application factory."""
    return app.extensions['plan_catalog']


@pytest.fixture
def make_user(db):
    """Factory for users; admins by default."""
    counter = {'n': 0}

    def _make_user(role=UserRole.ADMIN.value, email=None, password="password123", **kwargs):
        counter['n'] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            password=password,
            name=kwargs.pop('name', f"User {counter['n']}"),
            role=role,
            **kwargs
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user()


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user."""
    def _auth_headers(user):
        token = create_access_token(
            identity=str(user.id), additional_claims={'role': user.role}
        )
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def make_drivers(db):
    """Factory inserting ``count`` drivers for a user."""
    counter = {'n': 0}

    def _make_drivers(user, count, status=DriverStatus.ACTIVE.value, **kwargs):
        drivers = []
        for _ in range(count):
            counter['n'] += 1
            n = counter['n']
            drivers.append(Driver(
                user_id=user.id,
                name=kwargs.get('name', f"Driver {n}"),
                email=f"driver{n}@fleet.example.com",
                phone="555-0100",
                date_of_birth=date(1985, 6, 15),
                license_number=f"LIC{n:06d}",
                license_expiry=kwargs.get('license_expiry', date.today() + timedelta(days=365)),
                license_class=kwargs.get('license_class', "Class C"),
                state=kwargs.get('state', ''),
                status=status,
            ))
        db.session.add_all(drivers)
        db.session.commit()
        return drivers

    return _make_drivers


@pytest.fixture
def make_subscription(db, catalog):
    """Factory for a subscription on a given plan and status."""
    def _make_subscription(user, plan_id="starter", status=SubscriptionStatus.ACTIVE.value,
                           period_start=None, period_end=None, **kwargs):
        period_end = period_end or utcnow() + timedelta(days=29)
        subscription = Subscription(
            user_id=user.id,
            plan=catalog.get_plan(plan_id),
            status=status,
            current_period_start=period_start or period_end - timedelta(days=30),
            current_period_end=period_end,
            **kwargs
        )
        db.session.add(subscription)
        db.session.commit()
        return subscription

    return _make_subscription
