from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from dateutil.parser import isoparse


def local_now():
    """Current local wall-clock time (naive)"""
    return datetime.now().replace(microsecond=0)


def local_today():
    return date.today()


def parse_timestamp(value):
    """
    Parse a stored timestamp into a naive local datetime.

    Accepts datetime/date objects and ISO-8601 strings (``2025-03-05``,
    ``2025-03-05T10:00:00``, ``2025-03-05T10:00:00.000Z``). Aware values are
    converted to local time first. Returns None for anything unparseable.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = isoparse(str(value).strip())
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_timestamp(value):
    """Serialize a datetime for storage"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat(timespec='seconds')
    return str(value)


def parse_day(value):
    """Parse a 'YYYY-MM-DD' day string as a local date (None if invalid)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def to_decimal(amount):
    """Exact decimal for a stored price; non-numeric values count as zero."""
    if amount is None or isinstance(amount, bool):
        return Decimal(0)
    try:
        return Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return Decimal(0)


def format_currency(amount):
    """Format amount as currency"""
    return f"${to_decimal(amount):,.2f}"


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())
