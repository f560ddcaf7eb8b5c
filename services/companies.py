import logging
from typing import Any, Dict, Optional

from sqlalchemy import case, func, or_
from sqlalchemy.exc import IntegrityError

from id_generator import next_company_code
from models.company import Company
from models.lead import VisitorLead
from models.user import User, COMPANY_ADMIN, EMPLOYEE
from services.errors import ConflictError, NotFoundError
from utils.pagination import paginate
from utils.search import contains

logger = logging.getLogger('services.companies')

COMPANY_UPDATE_FIELDS = ("name", "contact_email", "contact_phone", "status")


def get_company(session, company_id) -> Company:
    company = session.get(Company, company_id)
    if not company:
        raise NotFoundError("Company not found")
    return company


def find_active_by_code(session, company_code: str) -> Optional[Company]:
    return session.query(Company).filter_by(company_code=company_code, status="active").first()


def _user_counts(session):
    return (
        session.query(
            User.company_id.label("company_id"),
            func.count(User.id).label("total_users"),
            func.count(case((User.role == COMPANY_ADMIN, User.id))).label("company_admins"),
            func.count(case((User.role == EMPLOYEE, User.id))).label("employees"),
        )
        .filter(User.is_active.is_(True))
        .group_by(User.company_id)
        .subquery()
    )


def _lead_counts(session):
    return (
        session.query(VisitorLead.company_id.label("company_id"), func.count(VisitorLead.id).label("total_leads"))
        .group_by(VisitorLead.company_id)
        .subquery()
    )


def list_companies(session, page: int, per_page: int, search: Optional[str] = None, status: Optional[str] = None):
    """Companies with active user / lead counters, newest first."""
    users = _user_counts(session)
    leads = _lead_counts(session)
    query = (
        session.query(
            Company,
            func.coalesce(users.c.total_users, 0),
            func.coalesce(users.c.company_admins, 0),
            func.coalesce(users.c.employees, 0),
            func.coalesce(leads.c.total_leads, 0),
        )
        .outerjoin(users, users.c.company_id == Company.id)
        .outerjoin(leads, leads.c.company_id == Company.id)
    )
    if search:
        query = query.filter(or_(contains(Company.name, search), contains(Company.company_code, search)))
    if status:
        query = query.filter(Company.status == status)
    query = query.order_by(Company.created_at.desc(), Company.id.desc())

    rows, pagination = paginate(query, page, per_page)
    companies = []
    for company, total_users, admins, employees, total_leads in rows:
        data = company.to_dict()
        data.update({
            "total_users": int(total_users),
            "company_admins": int(admins),
            "employees": int(employees),
            "total_leads": int(total_leads),
        })
        companies.append(data)
    return companies, pagination


def create_company(session, data: Dict[str, Any]) -> Company:
    code = data.get("company_code")
    if code:
        if session.query(Company.id).filter_by(company_code=code).first():
            raise ConflictError("Company code already exists")
    else:
        code = next_company_code(session)

    company = Company(
        name=data["name"],
        contact_email=data.get("contact_email"),
        contact_phone=data.get("contact_phone"),
        company_code=code,
        status="active",
    )
    try:
        with session.begin_nested():
            session.add(company)
    except IntegrityError:
        raise ConflictError("Company code already exists")
    logger.info("Created company %s (%s)", company.id, company.company_code)
    return company


def update_company(session, company_id, changes: Dict[str, Any]) -> Company:
    company = get_company(session, company_id)
    for field in COMPANY_UPDATE_FIELDS:
        if changes.get(field) is not None:
            setattr(company, field, changes[field])
    session.flush()
    return company
