"""
Validation of driver payloads.
"""
import re
from datetime import date

from fleetsub.errors import ValidationFailed
from fleetsub.models.driver import DriverStatus, LicenseClass

EMAIL_PATTERN = re.compile(r'^\S+@\S+\.\S+$')

# Request key -> model attribute
FIELD_MAP = {
    'name': 'name',
    'email': 'email',
    'phone': 'phone',
    'dateOfBirth': 'date_of_birth',
    'address': 'address',
    'city': 'city',
    'state': 'state',
    'zipCode': 'zip_code',
    'licenseNumber': 'license_number',
    'licenseExpiry': 'license_expiry',
    'licenseClass': 'license_class',
    'status': 'status',
}

REQUIRED_FIELDS = (
    'name', 'email', 'phone', 'dateOfBirth', 'licenseNumber', 'licenseExpiry', 'licenseClass'
)
DATE_FIELDS = ('dateOfBirth', 'licenseExpiry')
STATUSES = [s.value for s in DriverStatus]
LICENSE_CLASSES = [c.value for c in LicenseClass]


def parse_date(value):
    """Accept ``YYYY-MM-DD`` or an ISO timestamp and return its date."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def parse_driver_payload(data, partial=False):
    """
    Validate a driver payload and map it onto model attribute names.

    Args:
        data (dict): Request body using camelCase keys
        partial (bool): Only validate the keys present (updates)

    Returns:
        dict: Cleaned values keyed by model attribute

    Raises:
        ValidationFailed: With every problem joined into one message
    """
    errors = []
    cleaned = {}

    for key, attribute in FIELD_MAP.items():
        if key not in data:
            if not partial and key in REQUIRED_FIELDS:
                errors.append(f'{key} is required')
            continue

        value = data[key]
        if isinstance(value, str):
            value = value.strip()
        if key in REQUIRED_FIELDS and (value is None or value == ''):
            errors.append(f'{key} is required')
            continue

        if value is None:
            if key != 'status':
                cleaned[attribute] = ''
            continue

        if key in DATE_FIELDS:
            value = parse_date(value)
            if value is None:
                errors.append(f'{key} must be a valid date')
                continue
        elif not isinstance(value, str):
            errors.append(f'{key} must be a string')
            continue
        elif key == 'name' and not 2 <= len(value) <= 100:
            errors.append('name must be between 2 and 100 characters long')
            continue
        elif key == 'email' and not EMAIL_PATTERN.match(value):
            errors.append('email must be a valid email address')
            continue
        elif key == 'status' and value not in STATUSES:
            errors.append('Status must be either active, inactive, or pending')
            continue
        elif key == 'licenseClass' and value not in LICENSE_CLASSES:
            errors.append('License class must be Class A, B, C, or D')
            continue

        cleaned[attribute] = value

    if errors:
        raise ValidationFailed(', '.join(errors))

    if 'email' in cleaned:
        cleaned['email'] = cleaned['email'].lower()
    if 'license_number' in cleaned:
        cleaned['license_number'] = cleaned['license_number'].upper()
    return cleaned
