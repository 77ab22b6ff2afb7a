"""
Date helpers for billing periods.
"""
import calendar
import math
from datetime import timedelta


def add_months(value, months=1):
    """
    Add calendar months to a datetime, clamping the day to the target month.

    Args:
        value (datetime): Starting point
        months (int): Months to add

    Returns:
        datetime: Shifted datetime with the same time of day
    """
    month = value.month - 1 + months
    year = value.year + month // 12
    month = month % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def days_until(end, now):
    """Whole days remaining until ``end``, rounded up; negative once past."""
    return math.ceil((end - now) / timedelta(days=1))
