"""
Lead capture, listing and mutation.

A lead records that one employee met one visitor on behalf of one company.
At most one lead exists per (visitor, company, calendar day); the pre-check
reports the existing lead and the uq_lead_visitor_company_day constraint
catches concurrent inserts.
"""
import csv
import io
import logging
from datetime import date
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import case, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import contains_eager, joinedload

from models.company import Company
from models.lead import VisitorLead
from models.user import PLATFORM_ADMIN, COMPANY_ADMIN
from models.visitor import Visitor
from services.errors import ConflictError, InvalidCompanyError, NotFoundError, ValidationError
from services.visitors import get_visitor, resolve_visitor
from utils.clock import day_start, utc_now, utc_today
from utils.pagination import paginate
from utils.scoping import enforce_company_match, enforce_lead_access, scope_leads
from utils.search import contains

logger = logging.getLogger('services.leads')

SNAPSHOT_FIELDS = ("organization", "designation", "city", "country")
LEAD_UPDATE_FIELDS = ("interests", "notes", "follow_up_date")
DEFAULT_SEARCH_FIELDS = ("full_name", "phone", "email")

CSV_COLUMNS = (
    "id", "created_at", "visitor_name", "visitor_phone", "visitor_email",
    "organization", "designation", "city", "country", "interests",
    "notes", "follow_up_date", "employee_name", "employee_email", "company_name",
)


def capture_company_id(session, user, requested_company_id=None) -> int:
    """Company a new lead is filed under. Only platform admins may choose."""
    if user.role != PLATFORM_ADMIN:
        return user.company_id
    if not requested_company_id:
        raise InvalidCompanyError("Company ID required for platform admin")
    if not session.get(Company, requested_company_id):
        raise InvalidCompanyError("Invalid company ID")
    return requested_company_id


def find_same_day_lead(session, visitor_id, company_id, day: date) -> Optional[VisitorLead]:
    return (
        session.query(VisitorLead)
        .filter_by(visitor_id=visitor_id, company_id=company_id, capture_date=day)
        .first()
    )


def _duplicate(existing):
    logger.info("Duplicate lead for visitor %s in company %s", existing.visitor_id, existing.company_id)
    return ConflictError("Lead already exists for this visitor today", existing_lead_id=existing.id)


def create_lead(session, user, payload: Dict[str, Any]):
    """
    Capture a lead for `user`.

    payload carries either visitor_id or raw visitor fields (phone, full_name,
    ...), plus notes / follow_up_date and, for platform admins, company_id.
    Returns (lead, visitor).
    """
    company_id = capture_company_id(session, user, payload.get("company_id"))

    if payload.get("visitor_id"):
        visitor = get_visitor(session, payload["visitor_id"])
    else:
        if not payload.get("phone") or not payload.get("full_name"):
            raise ValidationError("Phone and full_name are required when visitor_id is not provided")
        visitor, created = resolve_visitor(session, payload["phone"], payload)
        if created:
            logger.info("Created visitor %s for phone %s", visitor.id, visitor.phone)

    now = utc_now()
    today = now.date()
    existing = find_same_day_lead(session, visitor.id, company_id, today)
    if existing:
        raise _duplicate(existing)

    lead = VisitorLead(
        company_id=company_id,
        visitor_id=visitor.id,
        employee_id=user.id,
        notes=payload.get("notes"),
        follow_up_date=payload.get("follow_up_date"),
        interests=payload.get("interests") or visitor.interests,
        capture_date=today,
        created_at=now,
        updated_at=now,
    )
    # Freeze the visitor's context so later visitor edits leave history alone
    for field in SNAPSHOT_FIELDS:
        setattr(lead, field, getattr(visitor, field) or payload.get(field))

    try:
        with session.begin_nested():
            session.add(lead)
    except IntegrityError:
        existing = find_same_day_lead(session, visitor.id, company_id, today)
        if existing is None:
            raise
        raise _duplicate(existing)
    return lead, visitor


def _lead_query(session):
    return (
        session.query(VisitorLead)
        .join(Visitor, VisitorLead.visitor_id == Visitor.id)
        .options(
            contains_eager(VisitorLead.visitor),
            joinedload(VisitorLead.employee),
            joinedload(VisitorLead.company),
        )
    )


def filtered_leads(session, user, filters: Optional[Dict[str, Any]] = None,
                   search_fields: Iterable[str] = DEFAULT_SEARCH_FIELDS):
    """Scoped lead query with optional date, employee, company and text filters."""
    filters = filters or {}
    query = scope_leads(
        _lead_query(session),
        user,
        requested_company_id=filters.get("company_id"),
        requested_employee_id=filters.get("employee_id"),
    )
    if filters.get("date_from"):
        query = query.filter(VisitorLead.created_at >= day_start(filters["date_from"]))
    if filters.get("date_to"):
        # date_to covers the whole day
        query = query.filter(VisitorLead.created_at < day_start(filters["date_to"], -1))
    if filters.get("search"):
        query = query.filter(or_(*[contains(getattr(Visitor, f), filters["search"]) for f in search_fields]))
    return query.order_by(VisitorLead.created_at.desc(), VisitorLead.id.desc())


def list_leads(session, user, page: int, per_page: int, filters=None,
               search_fields: Iterable[str] = DEFAULT_SEARCH_FIELDS):
    query = filtered_leads(session, user, filters, search_fields)
    return paginate(query, page, per_page)


def get_lead(session, user, lead_id) -> VisitorLead:
    lead = scope_leads(_lead_query(session), user).filter(VisitorLead.id == lead_id).first()
    if not lead:
        raise NotFoundError("Lead not found or access denied")
    return lead


def update_lead(session, user, lead_id, changes: Dict[str, Any], allowed=LEAD_UPDATE_FIELDS) -> VisitorLead:
    """Apply only the allow-listed fields; company and employee never move."""
    lead = session.get(VisitorLead, lead_id)
    if not lead:
        raise NotFoundError("Lead not found")
    enforce_lead_access(user, lead)

    for field in allowed:
        if field in changes:
            setattr(lead, field, changes[field])
    lead.updated_at = utc_now()
    session.flush()
    return lead


def delete_lead(session, user, lead_id) -> None:
    lead = session.get(VisitorLead, lead_id)
    if not lead:
        raise NotFoundError("Lead not found")
    if user.role == COMPANY_ADMIN:
        enforce_company_match(user, lead.company_id)
    session.delete(lead)
    session.flush()


def lead_counts(query_scope) -> Dict[str, int]:
    """Aggregate counters over an already-scoped VisitorLead column query."""
    total, last_30, last_7, today_count, with_follow_up, pending = query_scope.one()
    return {
        "total_leads": int(total or 0),
        "leads_last_30_days": int(last_30 or 0),
        "leads_last_7_days": int(last_7 or 0),
        "leads_today": int(today_count or 0),
        "leads_with_follow_up": int(with_follow_up or 0),
        "pending_follow_ups": int(pending or 0),
    }


def stats_columns(session, today: date):
    return session.query(
        func.count(VisitorLead.id),
        func.count(case((VisitorLead.created_at >= day_start(today, 30), 1))),
        func.count(case((VisitorLead.created_at >= day_start(today, 7), 1))),
        func.count(case((VisitorLead.created_at >= day_start(today), 1))),
        func.count(VisitorLead.follow_up_date),
        func.count(case((VisitorLead.follow_up_date >= today, 1))),
    )


def lead_stats(session, user, requested_company_id=None, today: Optional[date] = None) -> Dict[str, int]:
    today = today or utc_today()
    query = scope_leads(stats_columns(session, today), user, requested_company_id=requested_company_id)
    return lead_counts(query)


def _csv_row(lead):
    data = lead.to_dict(with_relations=True)
    return [data.get(col) if data.get(col) is not None else "" for col in CSV_COLUMNS]


def export_leads_csv(session, user, filters=None) -> str:
    si = io.StringIO()
    cw = csv.writer(si)
    cw.writerow(CSV_COLUMNS)
    for lead in filtered_leads(session, user, filters).all():
        cw.writerow(_csv_row(lead))
    return si.getvalue()
