"""
Row-visibility rules shared by every tenant-aware query.

platform_admin sees everything and may narrow to one company; company_admin
and employee are pinned to their own company, and employees additionally only
see leads they captured. A company_id supplied by a non-platform user is
ignored, never honoured.
"""
from models.lead import VisitorLead
from models.user import PLATFORM_ADMIN, EMPLOYEE
from services.errors import ForbiddenError


def get_company_id_for_request(user, requested_company_id=None):
    """
    PLATFORM_ADMIN can pass company_id.
    Others always get their own company_id.
    """
    if user.role == PLATFORM_ADMIN:
        return requested_company_id
    return user.company_id


def scope_company(query, column, user, requested_company_id=None):
    company_id = get_company_id_for_request(user, requested_company_id)
    if company_id is not None:
        query = query.filter(column == company_id)
    return query


def scope_leads(query, user, requested_company_id=None, requested_employee_id=None):
    """Apply company and ownership predicates to a VisitorLead query."""
    query = scope_company(query, VisitorLead.company_id, user, requested_company_id)
    if user.role == EMPLOYEE:
        query = query.filter(VisitorLead.employee_id == user.id)
    elif requested_employee_id is not None:
        query = query.filter(VisitorLead.employee_id == requested_employee_id)
    return query


def enforce_company_match(user, resource_company_id):
    """Raise ForbiddenError when a non-platform user touches another tenant's row."""
    if user.role == PLATFORM_ADMIN:
        return
    if user.company_id is None or resource_company_id != user.company_id:
        raise ForbiddenError("Access denied")


def enforce_lead_access(user, lead):
    if user.role == EMPLOYEE and lead.employee_id != user.id:
        raise ForbiddenError("Can only update your own leads")
    enforce_company_match(user, lead.company_id)
