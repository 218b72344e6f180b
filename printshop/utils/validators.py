"""
Validation utilities
"""
import re


def validate_email(email):
    """
    Validate email format

    Args:
        email (str): Email address to validate

    Returns:
        bool: True if valid, False otherwise
    """
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_mobile_number(mobile):
    """
    Validate a mobile number loosely: 7 to 15 digits once separators are removed

    Args:
        mobile (str): Mobile number to validate

    Returns:
        bool: True if valid, False otherwise
    """
    if not mobile:
        return False

    # Remove common separators
    cleaned = re.sub(r'[\s\-\(\)\.]', '', mobile)

    return bool(re.match(r'^\+?\d{7,15}$', cleaned))


def is_blank(value):
    """True for None, empty strings and whitespace-only strings"""
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(data, fields):
    """
    Collect missing required fields

    Args:
        data (dict): Submitted payload
        fields (dict): Field name -> human readable error message

    Returns:
        dict: Field name -> error message for every blank field
    """
    return {name: message for name, message in fields.items() if is_blank(data.get(name))}
