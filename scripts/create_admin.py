#!/usr/bin/env python
"""
Script to create (or promote) a fleet admin account.

Usage: python scripts/create_admin.py [email] [password]
"""
import logging
import sys

from fleetsub import create_app, db
from fleetsub.models.user import User, UserRole

logger = logging.getLogger("create_admin")


def create_admin(email, password):
    admin = User.query.filter_by(email=email).first()

    if admin is None:
        admin = User(email=email, password=password, name='Administrator',
                     role=UserRole.ADMIN.value)
        db.session.add(admin)
        db.session.commit()
        logger.info("Admin user created with ID: %s", admin.id)
    elif not admin.is_admin:
        admin.role = UserRole.ADMIN.value
        db.session.commit()
        logger.info("Updated user ID: %s with admin privileges", admin.id)
    else:
        logger.info("Admin user already exists with ID: %s", admin.id)
    return admin


if __name__ == "__main__":
    email = sys.argv[1] if len(sys.argv) > 1 else 'admin@example.com'
    password = sys.argv[2] if len(sys.argv) > 2 else 'admin123'
    app = create_app()
    with app.app_context():
        create_admin(email, password)
