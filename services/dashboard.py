"""Read-only rollups for the admin dashboards."""
import logging
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import case, func

from models.company import Company
from models.lead import VisitorLead
from models.user import User, PLATFORM_ADMIN, COMPANY_ADMIN, EMPLOYEE
from models.visitor import Visitor
from services.companies import get_company
from services.errors import InvalidCompanyError
from services.leads import lead_counts, stats_columns
from utils.clock import day_start, utc_today

logger = logging.getLogger('services.dashboard')

RECENT_LIMIT = 10


def _day(value):
    # func.date() gives a date on PostgreSQL and a string on SQLite
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def _activity(session, model, label, since):
    day = func.date(model.created_at)
    rows = (
        session.query(day, func.count(model.id))
        .filter(model.created_at >= since)
        .group_by(day)
        .all()
    )
    return [{"type": label, "count": int(count), "date": _day(d)} for d, count in rows]


def overview(session, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or utc_today()
    month_ago = day_start(today, 30)

    companies_total, companies_active = session.query(
        func.count(Company.id),
        func.count(case((Company.status == "active", 1))),
    ).one()

    users_total, platform_admins, company_admins, employees = (
        session.query(
            func.count(User.id),
            func.count(case((User.role == PLATFORM_ADMIN, 1))),
            func.count(case((User.role == COMPANY_ADMIN, 1))),
            func.count(case((User.role == EMPLOYEE, 1))),
        )
        .filter(User.is_active.is_(True))
        .one()
    )

    visitors_total, visitors_30 = session.query(
        func.count(Visitor.id),
        func.count(case((Visitor.created_at >= month_ago, 1))),
    ).one()

    leads_total, leads_30, leads_today = session.query(
        func.count(VisitorLead.id),
        func.count(case((VisitorLead.created_at >= month_ago, 1))),
        func.count(case((VisitorLead.created_at >= day_start(today), 1))),
    ).one()

    week_ago = day_start(today, 7)
    activity = _activity(session, VisitorLead, "leads", week_ago) + _activity(session, Visitor, "visitors", week_ago)
    activity.sort(key=lambda row: (row["date"], row["type"]))
    activity.reverse()

    return {
        "companies": {"total": int(companies_total), "active": int(companies_active)},
        "users": {
            "total": int(users_total),
            "platform_admins": int(platform_admins),
            "company_admins": int(company_admins),
            "employees": int(employees),
        },
        "visitors": {"total": int(visitors_total), "last_30_days": int(visitors_30)},
        "leads": {"total": int(leads_total), "last_30_days": int(leads_30), "today": int(leads_today)},
        "recent_activity": activity,
    }


def _recent_lead_rows(query, order_by, limit=RECENT_LIMIT):
    return [lead.to_dict(with_relations=True) for lead in query.order_by(*order_by).limit(limit).all()]


def _lead_query(session):
    return session.query(VisitorLead).join(Visitor, VisitorLead.visitor_id == Visitor.id)


def company_dashboard(session, user, requested_company_id=None, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Rollup for one company. Company admins always get their own; platform
    admins must name one.
    """
    today = today or utc_today()
    if user.role == PLATFORM_ADMIN:
        if not requested_company_id:
            raise InvalidCompanyError("Company ID required for platform admin")
        company_id = requested_company_id
    else:
        company_id = user.company_id
    company = get_company(session, company_id)

    users_total, employees = (
        session.query(func.count(User.id), func.count(case((User.role == EMPLOYEE, 1))))
        .filter(User.company_id == company.id, User.is_active.is_(True))
        .one()
    )

    leads_total, leads_30, leads_today = (
        session.query(
            func.count(VisitorLead.id),
            func.count(case((VisitorLead.created_at >= day_start(today, 30), 1))),
            func.count(case((VisitorLead.created_at >= day_start(today), 1))),
        )
        .filter(VisitorLead.company_id == company.id)
        .one()
    )

    leads_count = func.count(VisitorLead.id)
    leaderboard = (
        session.query(
            User.id,
            User.full_name,
            User.email,
            leads_count,
            func.count(case((VisitorLead.created_at >= day_start(today, 7), 1))),
        )
        .outerjoin(VisitorLead, VisitorLead.employee_id == User.id)
        .filter(User.company_id == company.id, User.role == EMPLOYEE, User.is_active.is_(True))
        .group_by(User.id, User.full_name, User.email)
        .order_by(leads_count.desc(), User.id)
        .all()
    )

    recent = _recent_lead_rows(
        _lead_query(session).filter(VisitorLead.company_id == company.id),
        (VisitorLead.created_at.desc(), VisitorLead.id.desc()),
    )

    return {
        "company": company.to_dict(),
        "users": {"total": int(users_total), "employees": int(employees)},
        "leads": {"total": int(leads_total), "last_30_days": int(leads_30), "today": int(leads_today)},
        "employee_stats": [
            {
                "id": emp_id,
                "full_name": full_name,
                "email": email,
                "leads_count": int(total),
                "leads_last_7_days": int(week),
            }
            for emp_id, full_name, email, total, week in leaderboard
        ],
        "recent_leads": recent,
    }


def employee_dashboard(session, user, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or utc_today()
    stats = lead_counts(stats_columns(session, today).filter(VisitorLead.employee_id == user.id))
    mine = _lead_query(session).filter(VisitorLead.employee_id == user.id)

    return {
        "stats": stats,
        "recent_leads": _recent_lead_rows(mine, (VisitorLead.created_at.desc(), VisitorLead.id.desc())),
        "pending_follow_ups": _recent_lead_rows(
            mine.filter(VisitorLead.follow_up_date >= today),
            (VisitorLead.follow_up_date.asc(), VisitorLead.id),
        ),
    }
