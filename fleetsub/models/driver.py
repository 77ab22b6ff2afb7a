"""
Driver model for the fleet roster.
"""
import calendar
from datetime import timedelta
from enum import Enum

from sqlalchemy import Index, extract, func

from fleetsub import db
from fleetsub.utils.dates import add_months

from .base import BaseModel, utcnow


class DriverStatus(Enum):
    """Enum for driver status values."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class LicenseClass(Enum):
    """Enum for license classes."""
    CLASS_A = "Class A"
    CLASS_B = "Class B"
    CLASS_C = "Class C"
    CLASS_D = "Class D"


class Driver(BaseModel):
    """
    Driver record owned by a fleet account.

    Attributes:
        user_id (int): Fleet account that owns the driver
        name (str): Full name
        email (str): Contact email (unique)
        phone (str): Contact phone
        date_of_birth (date): Date of birth
        address, city, state, zip_code (str): Postal address
        license_number (str): License number (unique, upper-cased)
        license_expiry (date): License expiration date
        license_class (str): One of the LicenseClass values
        status (str): One of the DriverStatus values
    """
    __tablename__ = 'drivers'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False)
    phone = db.Column(db.String(30), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=False)
    address = db.Column(db.String(255), nullable=False, default='')
    city = db.Column(db.String(100), nullable=False, default='')
    state = db.Column(db.String(100), nullable=False, default='')
    zip_code = db.Column(db.String(20), nullable=False, default='')
    license_number = db.Column(db.String(50), unique=True, nullable=False)
    license_expiry = db.Column(db.Date, nullable=False)
    license_class = db.Column(db.String(10), nullable=False, default=LicenseClass.CLASS_C.value)
    status = db.Column(db.String(20), nullable=False, default=DriverStatus.ACTIVE.value)

    owner = db.relationship('User', foreign_keys=[user_id])

    __table_args__ = (
        Index('idx_driver_user_id', 'user_id'),
        Index('idx_driver_user_status', 'user_id', 'status'),
        Index('idx_driver_license_expiry', 'license_expiry'),
    )

    def __init__(self, user_id, name, email, phone, date_of_birth, license_number,
                 license_expiry, license_class=LicenseClass.CLASS_C.value,
                 status=DriverStatus.ACTIVE.value, address='', city='', state='',
                 zip_code=''):
        self.user_id = user_id
        self.name = name.strip()
        self.email = email.strip().lower()
        self.phone = phone.strip()
        self.date_of_birth = date_of_birth
        self.license_number = license_number.strip().upper()
        self.license_expiry = license_expiry
        self.license_class = license_class
        self.status = status
        self.address = address
        self.city = city
        self.state = state
        self.zip_code = zip_code
        # Equal timestamps mark a record that has never been edited
        self.created_at = self.updated_at = utcnow()

    @property
    def is_license_expired(self):
        return utcnow().date() > self.license_expiry

    @classmethod
    def count_for_user(cls, user_id):
        """
        Count the drivers owned by a fleet account.

        Args:
            user_id (int): Owning user ID

        Returns:
            int: Number of drivers
        """
        return cls.query.filter_by(user_id=user_id).count()

    @classmethod
    def count_for_user_by_status(cls, user_id, status):
        """
        Count a fleet account's drivers in the given status.

        Args:
            user_id (int): Owning user ID
            status (str): One of the DriverStatus values

        Returns:
            int: Number of drivers
        """
        return cls.query.filter_by(user_id=user_id, status=status).count()

    @classmethod
    def counts_by_status(cls, user_id):
        rows = db.session.query(cls.status, func.count(cls.id)).filter(
            cls.user_id == user_id
        ).group_by(cls.status).all()
        counts = {status.value: 0 for status in DriverStatus}
        counts.update(dict(rows))
        return counts

    @classmethod
    def counts_by_column(cls, user_id, column):
        rows = db.session.query(column, func.count(cls.id)).filter(
            cls.user_id == user_id
        ).group_by(column).order_by(column).all()
        return {key or 'Unknown': count for key, count in rows}

    @classmethod
    def licenses_expiring_between(cls, user_id, start, end):
        """
        Drivers whose license expires within ``[start, end]``.

        Args:
            user_id (int): Owning user ID
            start (date): First day of the window
            end (date): Last day of the window

        Returns:
            list: Drivers ordered by expiry date
        """
        return cls.query.filter(
            cls.user_id == user_id,
            cls.license_expiry >= start,
            cls.license_expiry <= end,
        ).order_by(cls.license_expiry.asc(), cls.name.asc()).all()

    @classmethod
    def expired_license_count(cls, user_id, today=None):
        today = today or utcnow().date()
        return cls.query.filter(
            cls.user_id == user_id, cls.license_expiry < today
        ).count()

    @classmethod
    def expiring_license_count(cls, user_id, days=30, today=None):
        today = today or utcnow().date()
        return cls.query.filter(
            cls.user_id == user_id,
            cls.license_expiry >= today,
            cls.license_expiry <= today + timedelta(days=days),
        ).count()

    @classmethod
    def recently_created(cls, user_id, limit):
        return cls.query.filter(cls.user_id == user_id).order_by(
            cls.created_at.desc(), cls.id.desc()
        ).limit(limit).all()

    @classmethod
    def recently_updated(cls, user_id, limit):
        """Drivers edited at least once since creation, latest edit first."""
        return cls.query.filter(
            cls.user_id == user_id, cls.updated_at > cls.created_at
        ).order_by(cls.updated_at.desc(), cls.id.desc()).limit(limit).all()

    @classmethod
    def recently_deactivated(cls, user_id, limit):
        return cls.query.filter(
            cls.user_id == user_id, cls.status == DriverStatus.INACTIVE.value
        ).order_by(cls.updated_at.desc(), cls.id.desc()).limit(limit).all()

    @classmethod
    def active_licenses_expiring(cls, user_id, limit, days=30, today=None):
        """Active drivers whose license expires within ``days``, soonest first."""
        today = today or utcnow().date()
        return cls.query.filter(
            cls.user_id == user_id,
            cls.status == DriverStatus.ACTIVE.value,
            cls.license_expiry >= today,
            cls.license_expiry <= today + timedelta(days=days),
        ).order_by(cls.license_expiry.asc(), cls.id.asc()).limit(limit).all()

    @classmethod
    def monthly_registrations(cls, user_id, months=10):
        """
        Driver sign-ups per calendar month.

        Only months with at least one registration are reported; the most
        recent ``months`` of them are returned oldest first.

        Returns:
            list: Dicts with year, month (abbreviated name) and drivers
        """
        year = extract('year', cls.created_at)
        month = extract('month', cls.created_at)
        rows = db.session.query(year, month, func.count(cls.id)).filter(
            cls.user_id == user_id
        ).group_by(year, month).order_by(year.desc(), month.desc()).limit(months).all()

        return [
            {'year': int(y), 'month': calendar.month_abbr[int(m)], 'drivers': count}
            for y, m, count in reversed(rows)
        ]

    @classmethod
    def expiration_timeline(cls, user_id, months=6, today=None):
        """
        License expirations per calendar month, starting with the current one.

        Returns:
            list: Dicts with year, month (abbreviated name) and expiring
        """
        first_of_month = (today or utcnow().date()).replace(day=1)
        timeline = []
        for offset in range(months):
            start = add_months(first_of_month, offset)
            end = add_months(start, 1) - timedelta(days=1)
            expiring = cls.query.filter(
                cls.user_id == user_id,
                cls.license_expiry >= start,
                cls.license_expiry <= end,
            ).count()
            timeline.append({
                'year': start.year,
                'month': calendar.month_abbr[start.month],
                'expiring': expiring,
            })
        return timeline

    def __repr__(self):
        """String representation of the Driver model."""
        return f"<Driver {self.name} ({self.license_number})>"
