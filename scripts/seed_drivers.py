#!/usr/bin/env python
"""
Script to seed sample drivers for an admin account.

Drivers are created directly in the database, so the plan's driver quota is
not applied.

Usage: python scripts/seed_drivers.py admin@example.com [count]
"""
import logging
import random
import sys
from datetime import timedelta

from faker import Faker

from fleetsub import create_app, db
from fleetsub.models.base import utcnow
from fleetsub.models.driver import Driver, DriverStatus, LicenseClass
from fleetsub.models.user import User

# Initialize faker for generating realistic driver data
fake = Faker()

logger = logging.getLogger("seed_drivers")

STATUS_WEIGHTS = {
    DriverStatus.ACTIVE.value: 70,
    DriverStatus.INACTIVE.value: 15,
    DriverStatus.PENDING.value: 15,
}


def build_driver(user_id, index):
    """Random driver; roughly one in ten licenses already expired."""
    today = utcnow().date()
    if random.random() < 0.1:
        license_expiry = today - timedelta(days=random.randint(1, 180))
    else:
        license_expiry = today + timedelta(days=random.randint(1, 4 * 365))

    return Driver(
        user_id=user_id,
        name=fake.name(),
        email=f"driver{index}_{fake.user_name()}@{fake.domain_name()}",
        phone=fake.phone_number(),
        date_of_birth=fake.date_of_birth(minimum_age=21, maximum_age=65),
        address=fake.street_address(),
        city=fake.city(),
        state=fake.state(),
        zip_code=fake.postcode(),
        license_number=f"DL{index:04d}{fake.bothify('??####')}",
        license_expiry=license_expiry,
        license_class=random.choice([c.value for c in LicenseClass]),
        status=random.choices(list(STATUS_WEIGHTS), weights=list(STATUS_WEIGHTS.values()))[0],
    )


def seed_drivers(email, count):
    admin = User.query.filter_by(email=email).first()
    if admin is None or not admin.is_admin:
        logger.error("No admin account found for %s. Run create_admin.py first.", email)
        return 0

    start = Driver.count_for_user(admin.id)
    drivers = [build_driver(admin.id, start + i) for i in range(count)]
    db.session.add_all(drivers)
    db.session.commit()
    logger.info("Created %s drivers for %s", len(drivers), email)
    return len(drivers)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    app = create_app()
    with app.app_context():
        seed_drivers(sys.argv[1], int(sys.argv[2]) if len(sys.argv) > 2 else 20)
