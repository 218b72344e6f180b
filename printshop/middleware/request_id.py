"""
Request ID middleware for request tracing and logging
"""
import re
import uuid

REQUEST_ID_HEADER = 'X-Request-ID'

# Client supplied ids end up in log lines, so only short token-like values are reused
_VALID_REQUEST_ID = re.compile(r'^[A-Za-z0-9._-]{1,64}$')


class RequestIdMiddleware:
    """
    Tag every request with an id, exposed as ``environ['request_id']``
    and echoed back in the ``X-Request-ID`` response header.

    An incoming ``X-Request-ID`` (e.g. from a proxy) is kept when it looks
    like a token; anything else is replaced with a fresh uuid4 hex.
    """

    def __init__(self, app):
        self.app = app

    @staticmethod
    def resolve(environ):
        incoming = environ.get('HTTP_X_REQUEST_ID', '').strip()
        if _VALID_REQUEST_ID.match(incoming):
            return incoming
        return uuid.uuid4().hex

    def __call__(self, environ, start_response):
        request_id = self.resolve(environ)
        environ['request_id'] = request_id

        def start_response_with_id(status, headers, exc_info=None):
            headers = [(k, v) for k, v in headers if k.lower() != REQUEST_ID_HEADER.lower()]
            headers.append((REQUEST_ID_HEADER, request_id))
            return start_response(status, headers, exc_info)

        return self.app(environ, start_response_with_id)
