"""
User model for authentication and role management.
"""
from enum import Enum

from werkzeug.security import check_password_hash, generate_password_hash

from fleetsub import db
from .base import BaseModel


class UserRole(Enum):
    """Enum for user roles."""
    ADMIN = "admin"
    DRIVER = "driver"


class User(BaseModel):
    """
    User model for authentication and role management.

    Attributes:
        email (str): User's email address (unique)
        name (str): Display name
        password_hash (str): Hashed password
        role (str): admin for fleet owners, driver for driver accounts
        is_active (bool): Whether the account may sign in
        driver_id (int): Driver record a driver account belongs to
    """
    __tablename__ = 'users'

    email = db.Column(db.String(100), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False, default='')
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=UserRole.DRIVER.value)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    driver_id = db.Column(
        db.Integer,
        db.ForeignKey('drivers.id', ondelete='SET NULL', use_alter=True,
                      name='fk_users_driver_id'),
        nullable=True
    )

    # Relationships
    driver = db.relationship('Driver', foreign_keys=[driver_id])
    subscription = db.relationship('Subscription', back_populates='user', uselist=False)

    def __init__(self, email, password, name='', role=UserRole.DRIVER.value,
                 is_active=True, driver_id=None):
        """
        Initialize a new User instance.

        Args:
            email (str): User's email
            password (str): User's password (will be hashed)
            name (str, optional): Display name
            role (str, optional): admin or driver
            is_active (bool, optional): Whether the account may sign in
            driver_id (int, optional): Linked driver record
        """
        self.email = email.strip().lower()
        self.name = name
        self.role = role
        self.is_active = is_active
        self.driver_id = driver_id
        self.set_password(password)

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN.value

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """
        Verify a password against the stored hash.

        Args:
            password (str): Password to check

        Returns:
            bool: True if password matches, False otherwise
        """
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        """String representation of the User model."""
        return f"<User {self.email} ({self.role})>"
