"""
Response envelope helpers: every JSON endpoint answers with
``{"success": bool, "data"?: ..., "message"?: ...}``
"""
from flask import jsonify


def success(data=None, message=None, status=200):
    payload = {'success': True}
    if data is not None:
        payload['data'] = data
    if message:
        payload['message'] = message
    return jsonify(payload), status
