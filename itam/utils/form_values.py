"""
Coercion helpers for values arriving from HTML forms

Empty strings are treated as "not provided" and become None.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation


def blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def parse_int(value):
    value = blank_to_none(value)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f'Invalid number: {value}')


def parse_date(value):
    """Accepts a date, a datetime or a 'YYYY-MM-DD' string"""
    value = blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value[:10], '%Y-%m-%d').date()
    except ValueError:
        raise ValueError(f'Invalid date: {value}')


def parse_datetime(value):
    """Accepts a datetime, a date (midnight) or an ISO 'YYYY-MM-DD[THH:MM[:SS]]' string"""
    value = blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    for fmt in ('%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M:%S', '%Y-%m-%d'):
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f'Invalid date: {value}')


def parse_amount(value, label='Amount'):
    """
    Non-negative decimal amount.

    Raises:
        ValueError: If the value is not a number or is negative
    """
    value = blank_to_none(value)
    if value is None:
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f'{label} must be a valid positive number')
    if not amount.is_finite() or amount < 0:
        raise ValueError(f'{label} must be a valid positive number')
    return amount


def display_value(value):
    """String form used when comparing and logging field changes"""
    if value is None:
        return ''
    if isinstance(value, (list, tuple)):
        return ', '.join(str(item) for item in value)
    if isinstance(value, Decimal):
        return f'{value:.2f}'
    if isinstance(value, float):
        return f'{Decimal(str(value)):.2f}'
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)
