import datetime

import jwt
from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash


def hash_password(password):
    return generate_password_hash(password)


def verify_password(hash, password):
    if not hash or password is None:
        return False
    return check_password_hash(hash, password)


def generate_token(user):
    payload = {
        "userId": user.id,
        "email": user.email,
        "role": user.role,
        "companyId": user.company_id,
        "exp": datetime.datetime.now(datetime.timezone.utc)
        + datetime.timedelta(days=current_app.config.get("JWT_EXPIRES_DAYS", 7)),
    }
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm="HS256")


def decode_token(token):
    """Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError on bad tokens."""
    return jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=["HS256"])
