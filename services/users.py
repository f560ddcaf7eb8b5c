"""
User management for platform and company admins.

Users are never hard-deleted here: deactivation flips is_active, which also
locks the account out of login and token lookups.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy import or_
from sqlalchemy.orm import joinedload

from models.company import Company
from models.user import User, PLATFORM_ADMIN, COMPANY_ADMIN, EMPLOYEE
from services.errors import (
    ConflictError, ForbiddenError, InvalidCompanyError, NotFoundError, ValidationError,
)
from utils.auth_utils import hash_password
from utils.clock import utc_now
from utils.pagination import paginate
from utils.scoping import scope_company
from utils.search import contains

logger = logging.getLogger('services.users')

PROFILE_FIELDS = ("full_name", "phone")
COMPANY_ADMIN_UPDATE_FIELDS = ("full_name", "email", "phone", "is_active")


def get_user(session, user_id) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def ensure_email_available(session, email: str, exclude_user_id=None) -> None:
    query = session.query(User.id).filter(User.email == email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    if query.first():
        raise ConflictError("Email already exists")


def _ensure_company(session, company_id) -> Company:
    company = session.get(Company, company_id) if company_id else None
    if not company:
        raise InvalidCompanyError("Invalid company ID")
    return company


def _new_user(session, data: Dict[str, Any], role: str, company_id) -> User:
    email = normalize_email(data["email"])
    ensure_email_available(session, email)
    user = User(
        email=email,
        password_hash=hash_password(data["password"]),
        full_name=data["full_name"],
        phone=data.get("phone"),
        role=role,
        company_id=company_id,
        is_active=True,
    )
    session.add(user)
    session.flush()
    logger.info("Created %s %s in company %s", role, user.id, company_id)
    return user


def create_user(session, actor: User, data: Dict[str, Any]) -> User:
    """
    Platform admins may create any role; company admins only employees of
    their own company, whatever company_id the request carries.
    """
    role = data["role"]
    if actor.role == COMPANY_ADMIN:
        if role != EMPLOYEE:
            raise ForbiddenError("Company admins can only create employees")
        return _new_user(session, data, EMPLOYEE, actor.company_id)

    if role == PLATFORM_ADMIN:
        return _new_user(session, data, PLATFORM_ADMIN, None)
    company = _ensure_company(session, data.get("company_id"))
    return _new_user(session, data, role, company.id)


def list_users(session, actor: User, page: int, per_page: int, role: Optional[str] = None,
               company_id=None, search: Optional[str] = None):
    query = (
        session.query(User)
        .options(joinedload(User.company))
        .filter(User.is_active.is_(True))
    )
    query = scope_company(query, User.company_id, actor, company_id)
    if role:
        query = query.filter(User.role == role)
    if search:
        query = query.filter(or_(
            contains(User.full_name, search),
            contains(User.email, search),
            contains(User.phone, search),
        ))
    query = query.order_by(User.created_at.desc(), User.id.desc())
    return paginate(query, page, per_page)


def update_user(session, actor: User, user_id, changes: Dict[str, Any]) -> User:
    """Only supplied (non-null) fields change. Company admins never move users between companies."""
    target = get_user(session, user_id)

    if actor.role == COMPANY_ADMIN:
        if target.company_id != actor.company_id:
            raise ForbiddenError("You can only update employees from your own company")
        if changes.get("role") and changes["role"] != EMPLOYEE:
            raise ForbiddenError("Company admin can only assign employee role")
        changes.pop("company_id", None)

    if changes.get("email"):
        changes["email"] = normalize_email(changes["email"])
        ensure_email_available(session, changes["email"], exclude_user_id=target.id)

    if changes.get("company_id") is not None:
        _ensure_company(session, changes["company_id"])

    new_role = changes.get("role") or target.role
    new_company_id = changes.get("company_id") or target.company_id
    if new_role != PLATFORM_ADMIN and not new_company_id:
        raise ValidationError("company_id is required for company_admin and employee")

    for field in ("full_name", "email", "phone", "role", "company_id"):
        if changes.get(field) is not None:
            setattr(target, field, changes[field])
    target.updated_at = utc_now()
    session.flush()
    return target


def deactivate_user(session, actor: User, user_id) -> User:
    if user_id == actor.id:
        raise ValidationError("Cannot deactivate your own account")
    target = get_user(session, user_id)
    target.is_active = False
    target.updated_at = utc_now()
    session.flush()
    logger.info("User %s deactivated by %s", target.id, actor.id)
    return target


def delete_employee(session, actor: User, employee_id) -> User:
    """Soft delete an employee of the acting company admin's company."""
    employee = (
        session.query(User)
        .filter_by(id=employee_id, company_id=actor.company_id, role=EMPLOYEE)
        .first()
    )
    if not employee:
        raise NotFoundError("Employee not found or you do not have permission to delete this employee")
    employee.is_active = False
    employee.updated_at = utc_now()
    session.flush()
    return employee


# ---------------------------
# Company admins
# ---------------------------
def get_company_admin(session, admin_id) -> User:
    admin = session.query(User).filter_by(id=admin_id, role=COMPANY_ADMIN).first()
    if not admin:
        raise NotFoundError("Company admin not found")
    return admin


def list_company_admins(session, page: int, per_page: int, search: Optional[str] = None,
                        status: Optional[str] = None):
    query = session.query(User).options(joinedload(User.company)).filter(User.role == COMPANY_ADMIN)
    if search:
        query = query.filter(or_(
            contains(User.full_name, search),
            contains(User.email, search),
            contains(User.phone, search),
        ))
    if status == "active":
        query = query.filter(User.is_active.is_(True))
    elif status == "inactive":
        query = query.filter(User.is_active.is_(False))
    query = query.order_by(User.created_at.desc(), User.id.desc())
    return paginate(query, page, per_page)


def create_company_admin(session, data: Dict[str, Any]) -> User:
    company = _ensure_company(session, data.get("company_id"))
    return _new_user(session, data, COMPANY_ADMIN, company.id)


def update_company_admin(session, admin_id, changes: Dict[str, Any]) -> User:
    admin = get_company_admin(session, admin_id)
    if changes.get("email"):
        changes["email"] = normalize_email(changes["email"])
        ensure_email_available(session, changes["email"], exclude_user_id=admin.id)
    for field in COMPANY_ADMIN_UPDATE_FIELDS:
        if changes.get(field) is not None:
            setattr(admin, field, changes[field])
    admin.updated_at = utc_now()
    session.flush()
    return admin


def delete_company_admin(session, admin_id) -> User:
    admin = get_company_admin(session, admin_id)
    admin.is_active = False
    admin.updated_at = utc_now()
    session.flush()
    return admin
