import logging
from typing import Any, Dict

from models.user import User, EMPLOYEE
from services.companies import find_active_by_code
from services.errors import AuthenticationError, ForbiddenError, ValidationError
from services.users import PROFILE_FIELDS, _new_user, normalize_email
from utils.auth_utils import hash_password, verify_password
from utils.clock import utc_now

logger = logging.getLogger('services.auth')


def authenticate(session, email: str, password: str) -> User:
    """Active user with matching credentials, else AuthenticationError."""
    user = session.query(User).filter_by(email=normalize_email(email), is_active=True).first()
    if not user or not verify_password(user.password_hash, password):
        logger.info("Login failed for %s", email)
        raise AuthenticationError("Invalid credentials")
    return user


def authenticate_mobile(session, email: str, password: str) -> User:
    user = authenticate(session, email, password)
    if user.role != EMPLOYEE:
        raise ForbiddenError("Mobile access restricted to employees only")
    if not user.company_id or not user.company:
        raise AuthenticationError("Employee must be assigned to a company")
    if not user.company.is_active:
        raise AuthenticationError("Company is inactive. Please contact your administrator.")
    return user


def update_profile(session, user: User, changes: Dict[str, Any]) -> User:
    for field in PROFILE_FIELDS:
        if changes.get(field) is not None:
            setattr(user, field, changes[field])
    user.updated_at = utc_now()
    session.flush()
    return user


def change_password(session, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(user.password_hash, current_password):
        raise AuthenticationError("Current password is incorrect")
    if len(new_password or "") < 6:
        raise ValidationError("New password must be at least 6 characters")
    user.password_hash = hash_password(new_password)
    user.updated_at = utc_now()
    session.flush()


def register_employee(session, data: Dict[str, Any]) -> User:
    """Self-service signup: joins an active company by its company_code."""
    company = find_active_by_code(session, data["company_code"])
    if not company:
        raise ValidationError("Invalid company code or company inactive")
    return _new_user(session, data, EMPLOYEE, company.id)
