from datetime import datetime, timezone
from functools import wraps

import bcrypt
import jwt
from flask import current_app, g, request

from printshop.errors import AuthenticationError


def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash"""
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


def generate_token(admin_id: int, username: str) -> str:
    """Generate a JWT for an authenticated admin"""
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(admin_id),
        'username': username,
        'role': 'admin',
        'exp': now + current_app.config['JWT_ACCESS_TOKEN_EXPIRES'],
        'iat': now,
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm=current_app.config['JWT_ALGORITHM']
    )


def decode_token(token: str) -> dict:
    """Decode and verify JWT token"""
    try:
        return jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError('Token has expired')
    except jwt.InvalidTokenError:
        raise AuthenticationError('Invalid token')


def require_admin(f):
    """Decorator rejecting requests without a valid admin token before the handler runs"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get('Authorization')

        if not auth_header:
            raise AuthenticationError('Missing authorization header')

        # Extract token from "Bearer <token>"
        scheme, _, token = auth_header.partition(' ')
        if scheme.lower() != 'bearer' or not token:
            raise AuthenticationError('Invalid authorization header')

        payload = decode_token(token.strip())
        if payload.get('role') != 'admin':
            raise AuthenticationError('Admin access required')

        # Attach admin info to the request context
        g.admin_id = int(payload['sub'])
        g.admin_username = payload.get('username')

        return f(*args, **kwargs)

    return decorated_function
