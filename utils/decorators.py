import logging
from functools import wraps

import jwt
from flask import request, g

from models import db
from models.user import User, EMPLOYEE
from utils.auth_utils import decode_token
from utils.responses import fail

logger = logging.getLogger('utils.decorators')


def _bearer_token():
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None
    token = auth_header.split(' ', 1)[1].strip()
    if not token or token.lower() in ('null', 'undefined'):
        return None
    return token


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = _bearer_token()
        if not token:
            logger.info("Auth failed: token missing for %s %s", request.method, request.path)
            return fail('Access token required', 401)
        try:
            payload = decode_token(token)
        except jwt.ExpiredSignatureError:
            return fail('Token expired', 401)
        except jwt.InvalidTokenError:
            return fail('Invalid token', 401)

        # Re-read the user so deactivation takes effect before the token expires
        user = db.session.get(User, payload.get('userId'))
        if not user or not user.is_active:
            logger.info("Auth failed: user %s missing or inactive", payload.get('userId'))
            return fail('Invalid token or user inactive', 401)

        g.user = user
        g.jwt_payload = payload
        return f(*args, **kwargs)
    return decorated


def role_required(allowed_roles):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = g.get('user')
            if not user:
                return fail('Authentication required', 401)
            if user.role not in allowed_roles:
                return fail('Insufficient permissions', 403)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def mobile_required(f):
    """Mobile endpoints are for employees attached to a company."""
    @wraps(f)
    def decorated(*args, **kwargs):
        user = g.get('user')
        if not user:
            return fail('Authentication required', 401)
        if user.role != EMPLOYEE:
            return fail('Mobile access restricted to employees only', 403)
        if not user.company_id:
            return fail('Employee must be assigned to a company', 401)
        return f(*args, **kwargs)
    return decorated
