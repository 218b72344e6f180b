"""Input sanitization utilities to prevent XSS and injection attacks."""

import html

from flask import request

from printshop.utils.helpers import parse_string_list


def sanitize_string(value):
    """Escape HTML entities in a string.

    Converts < > & " ' to their HTML entity equivalents so that
    user-supplied strings cannot inject markup or script tags.
    """
    if not isinstance(value, str):
        return value
    return html.escape(value, quote=True)


def sanitize_dict(data):
    """Recursively walk a dict/list structure and sanitize all string values.

    Non-string leaves (int, float, bool, None) are returned unchanged.
    """
    if isinstance(data, dict):
        return {key: sanitize_dict(value) for key, value in data.items()}
    if isinstance(data, list):
        return [sanitize_dict(item) for item in data]
    if isinstance(data, str):
        return sanitize_string(data)
    return data


def request_fields(list_fields=()):
    """Return the sanitized body of the current request as a dict.

    JSON bodies are used as-is; form bodies (multipart uploads) are
    flattened to single values except for the names in ``list_fields``,
    which keep every submitted value.
    """
    if request.is_json:
        raw = request.get_json(silent=True)
        data = dict(raw) if isinstance(raw, dict) else {}
    else:
        data = {}
        for key in request.form.keys():
            if key in list_fields:
                data[key] = request.form.getlist(key)
            else:
                data[key] = request.form.get(key)

    # JSON-encoded lists must be decoded before their quotes are escaped
    for key in list_fields:
        if key in data:
            parsed = parse_string_list(data[key])
            if parsed is not None:
                data[key] = parsed
    return sanitize_dict(data)
