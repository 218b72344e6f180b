"""Utilities package"""
from .validators import validate_email, validate_mobile_number, is_blank, require_fields
from .helpers import (
    parse_datetime, parse_decimal, parse_string_list, safe_int, clean_text, parse_id, is_numeric_reference,
)
from .responses import success

__all__ = [
    'validate_email',
    'validate_mobile_number',
    'is_blank',
    'require_fields',
    'parse_datetime',
    'parse_decimal',
    'parse_string_list',
    'safe_int',
    'clean_text',
    'parse_id',
    'is_numeric_reference',
    'success',
]
