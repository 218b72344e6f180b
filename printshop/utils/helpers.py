"""
Helper utilities
"""
import json
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation


def parse_datetime(value):
    """
    Parse an ISO-8601 timestamp into naive UTC

    Naive input is taken to be UTC already; a trailing ``Z`` is accepted.

    Args:
        value (str): Timestamp string

    Returns:
        datetime: Naive UTC datetime or None if invalid
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        if not isinstance(value, str) or not value.strip():
            return None
        try:
            parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_decimal(value, places=2):
    """
    Convert a number or numeric string to a quantized Decimal

    Args:
        value: Value to convert
        places (int): Decimal places to keep

    Returns:
        Decimal: Converted value or None if not a finite number
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount.quantize(Decimal(1).scaleb(-places))


def parse_string_list(value):
    """
    Normalise a list submitted as JSON, as a JSON string or as repeated form fields

    Returns:
        list: Non-blank, stripped strings (None when the shape is unusable)
    """
    if isinstance(value, str):
        text = value.strip()
        if text.startswith('['):
            try:
                value = json.loads(text)
            except ValueError:
                return None
        else:
            value = [text] if text else []
    if isinstance(value, list) and len(value) == 1 and isinstance(value[0], str) \
            and value[0].strip().startswith('['):
        return parse_string_list(value[0])
    if not isinstance(value, list):
        return None
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def safe_int(value, default=None):
    """
    Safely convert value to int

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        int: Converted value or default
    """
    if isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return default


MAX_RECORD_ID = 2 ** 31 - 1


def parse_id(value):
    """
    Record id from an int or an ASCII digit string

    Returns:
        int: The id, or None when the value is not an id the integer
        primary key columns can hold
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    else:
        text = clean_text(value)
        if not text or not (text.isascii() and text.isdigit()):
            return None
        number = int(text)
    return number if 1 <= number <= MAX_RECORD_ID else None


def is_numeric_reference(value):
    """True for an int or a string made only of ASCII digits"""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    text = clean_text(value)
    return bool(text) and text.isascii() and text.isdigit()


def clean_text(value):
    """Strip a submitted string, mapping blanks to None"""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
