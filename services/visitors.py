"""
Visitor reconciliation and lookups.

Visitors are global: one row per phone number, reused by every company that
meets the same person. Reconciliation never merges new details into an
existing visitor.
"""
import logging
import re
from typing import Optional, Dict, Any, Tuple

from sqlalchemy import func, case, or_
from sqlalchemy.exc import IntegrityError

from models.lead import VisitorLead
from models.visitor import Visitor
from services.errors import ValidationError, NotFoundError, ConflictError
from utils.clock import day_start, utc_now, utc_today
from utils.pagination import paginate
from utils.search import contains

logger = logging.getLogger('services.visitors')

VISITOR_FIELDS = ("full_name", "email", "organization", "designation", "city", "country", "interests")


def find_by_phone(session, phone: str) -> Optional[Visitor]:
    return session.query(Visitor).filter(Visitor.phone == phone).first()


def get_visitor(session, visitor_id) -> Visitor:
    visitor = session.get(Visitor, visitor_id)
    if not visitor:
        raise NotFoundError("Visitor not found")
    return visitor


def _insert_visitor(session, phone: str, details: Dict[str, Any]) -> Visitor:
    # A duplicate phone rolls back to the savepoint only
    visitor = Visitor(phone=phone, **{f: details.get(f) or None for f in VISITOR_FIELDS})
    with session.begin_nested():
        session.add(visitor)
    return visitor


def resolve_visitor(session, phone: str, details: Optional[Dict[str, Any]] = None) -> Tuple[Visitor, bool]:
    """
    Find the visitor for a phone number or create one.

    Returns (visitor, created). An existing visitor wins outright; supplied
    details are only used when a new row is inserted, and then full_name is
    mandatory.
    """
    details = details or {}
    if not phone:
        raise ValidationError("Phone is required")

    existing = find_by_phone(session, phone)
    if existing:
        return existing, False

    if not details.get("full_name"):
        raise ValidationError("Phone and full_name are required when visitor_id is not provided")

    try:
        return _insert_visitor(session, phone, details), True
    except IntegrityError:
        # Another request inserted the same phone between our lookup and insert
        existing = find_by_phone(session, phone)
        if existing is None:
            raise
        logger.info("Visitor %s created concurrently; reusing id %s", phone, existing.id)
        return existing, False


def create_visitor(session, phone: str, details: Dict[str, Any]) -> Visitor:
    """Explicit visitor registration: an existing phone is a conflict."""
    existing = find_by_phone(session, phone)
    if existing:
        raise ConflictError("Visitor with this phone number already exists", visitor_id=existing.id)
    if not details.get("full_name"):
        raise ValidationError("full_name is required for a new visitor")
    try:
        return _insert_visitor(session, phone, details)
    except IntegrityError:
        existing = find_by_phone(session, phone)
        raise ConflictError("Visitor with this phone number already exists",
                            visitor_id=existing.id if existing else None)


def update_visitor(session, visitor_id, changes: Dict[str, Any]) -> Visitor:
    visitor = get_visitor(session, visitor_id)
    for field in VISITOR_FIELDS:
        if field in changes:
            if field == "full_name" and not changes[field]:
                continue
            setattr(visitor, field, changes[field])
    visitor.updated_at = utc_now()
    session.flush()
    return visitor


def delete_visitor(session, visitor_id) -> int:
    visitor = get_visitor(session, visitor_id)
    session.delete(visitor)
    session.flush()
    return visitor_id


def search_by_phone(session, fragment: str, limit: int = 10):
    if not fragment or len(fragment) < 3:
        raise ValidationError("Phone number must be at least 3 digits")
    return (
        session.query(Visitor)
        .filter(contains(Visitor.phone, fragment))
        .order_by(Visitor.created_at.desc())
        .limit(limit)
        .all()
    )


def search(session, phone: Optional[str] = None, full_name: Optional[str] = None, limit: int = 20):
    query = session.query(Visitor)
    if phone:
        query = query.filter(contains(Visitor.phone, phone))
    if full_name:
        query = query.filter(contains(Visitor.full_name, full_name))
    return query.order_by(Visitor.created_at.desc()).limit(limit).all()


def list_visitors(session, page: int, per_page: int, search_term: Optional[str] = None):
    query = session.query(Visitor)
    if search_term:
        query = query.filter(or_(
            contains(Visitor.phone, search_term),
            contains(Visitor.full_name, search_term),
            contains(Visitor.email, search_term),
        ))
    query = query.order_by(Visitor.created_at.desc(), Visitor.id.desc())
    return paginate(query, page, per_page)


def visit_summary(session, visitor: Visitor) -> Dict[str, Any]:
    """Visitor details plus how often any company captured them as a lead."""
    total, last_visit = session.query(
        func.count(VisitorLead.id), func.max(VisitorLead.created_at)
    ).filter(VisitorLead.visitor_id == visitor.id).one()
    data = visitor.to_dict()
    data["total_visits"] = int(total or 0)
    data["last_visit"] = last_visit.isoformat() if last_visit else None
    return data


def phone_suggestions(session, query_text: str, limit: int = 10):
    digits = re.sub(r"\D", "", query_text or "")
    if not digits:
        return []
    rows = (
        session.query(Visitor.phone, Visitor.full_name)
        .filter(Visitor.phone.like(f"{digits}%"))
        .order_by(Visitor.created_at.desc())
        .limit(limit)
        .all()
    )
    return [f"{phone}({full_name})" for phone, full_name in rows]


def visitor_stats(session, today=None) -> Dict[str, int]:
    today = today or utc_today()
    total, last_30, last_7, today_count = session.query(
        func.count(Visitor.id),
        func.count(case((Visitor.created_at >= day_start(today, 30), 1))),
        func.count(case((Visitor.created_at >= day_start(today, 7), 1))),
        func.count(case((Visitor.created_at >= day_start(today), 1))),
    ).one()
    return {
        "total_visitors": int(total or 0),
        "visitors_last_30_days": int(last_30 or 0),
        "visitors_last_7_days": int(last_7 or 0),
        "visitors_today": int(today_count or 0),
    }
