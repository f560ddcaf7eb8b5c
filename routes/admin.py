import logging

from flask import Blueprint, current_app, g, request

from models import db
from models.user import PLATFORM_ADMIN, COMPANY_ADMIN, EMPLOYEE
from schemas.admin import (
    CreateCompanyAdminSchema, CreateCompanySchema, CreateUserSchema,
    UpdateCompanyAdminSchema, UpdateCompanySchema, UpdateUserSchema,
)
from services import companies as companies_service
from services import dashboard as dashboard_service
from services import users as users_service
from services.errors import ServiceError
from utils.decorators import token_required, role_required
from utils.responses import ok, server_error, service_fail
from utils.validators import query_int, validate_body

logger = logging.getLogger('routes.admin')

admin_bp = Blueprint('admin', __name__)

ADMIN_ROLES = [PLATFORM_ADMIN, COMPANY_ADMIN]


def _page():
    return query_int('page', 1, minimum=1), current_app.config['PAGE_SIZE']


# -----------------------------
# Companies
# -----------------------------
@admin_bp.route('/companies', methods=['GET'])
@token_required
@role_required([PLATFORM_ADMIN])
def list_companies():
    page, per_page = _page()
    try:
        companies, pagination = companies_service.list_companies(
            db.session, page, per_page,
            search=request.args.get('search'),
            status=request.args.get('status'),
        )
        return ok(companies, pagination=pagination)
    except Exception as e:
        return server_error(logger, 'Failed to fetch companies', e)


@admin_bp.route('/companies', methods=['POST'])
@token_required
@role_required([PLATFORM_ADMIN])
@validate_body(CreateCompanySchema)
def create_company():
    try:
        company = companies_service.create_company(db.session, g.body.model_dump())
        db.session.commit()
        return ok(company.to_dict(), 201, message='Company created successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to create company', e)


@admin_bp.route('/companies/<int:company_id>', methods=['PUT'])
@token_required
@role_required([PLATFORM_ADMIN])
@validate_body(UpdateCompanySchema)
def update_company(company_id):
    try:
        company = companies_service.update_company(db.session, company_id, g.body.model_dump(exclude_unset=True))
        db.session.commit()
        return ok(company.to_dict(), message='Company updated successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to update company', e)


# -----------------------------
# Users
# -----------------------------
@admin_bp.route('/users', methods=['GET'])
@token_required
@role_required(ADMIN_ROLES)
def list_users():
    page, per_page = _page()
    try:
        users, pagination = users_service.list_users(
            db.session, g.user, page, per_page,
            role=request.args.get('role'),
            company_id=query_int('company_id'),
            search=request.args.get('search'),
        )
        return ok([u.to_dict() for u in users], pagination=pagination)
    except Exception as e:
        return server_error(logger, 'Failed to fetch users', e)


@admin_bp.route('/users', methods=['POST'])
@token_required
@role_required(ADMIN_ROLES)
@validate_body(CreateUserSchema)
def create_user():
    try:
        user = users_service.create_user(db.session, g.user, g.body.model_dump())
        db.session.commit()
        return ok(user.to_dict(), 201, message='User created successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to create user', e)


@admin_bp.route('/users/<int:user_id>', methods=['PUT'])
@token_required
@role_required(ADMIN_ROLES)
@validate_body(UpdateUserSchema)
def update_user(user_id):
    try:
        user = users_service.update_user(db.session, g.user, user_id, g.body.model_dump(exclude_unset=True))
        db.session.commit()
        return ok(user.to_dict(), message='User updated successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to update user', e)


@admin_bp.route('/users/<int:user_id>/deactivate', methods=['PUT'])
@token_required
@role_required([PLATFORM_ADMIN])
def deactivate_user(user_id):
    try:
        user = users_service.deactivate_user(db.session, g.user, user_id)
        db.session.commit()
        return ok(user.to_dict(), message='User deactivated successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to deactivate user', e)


@admin_bp.route('/employees/<int:employee_id>', methods=['DELETE'])
@token_required
@role_required([COMPANY_ADMIN])
def delete_employee(employee_id):
    try:
        employee = users_service.delete_employee(db.session, g.user, employee_id)
        db.session.commit()
        logger.info("Employee %s deactivated by %s", employee.id, g.user.id)
        return ok({'id': employee.id, 'full_name': employee.full_name}, message='Employee deleted successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to delete employee', e)


# -----------------------------
# Company admins
# -----------------------------
@admin_bp.route('/company-admins', methods=['GET'])
@token_required
@role_required([PLATFORM_ADMIN])
def list_company_admins():
    page, per_page = _page()
    try:
        admins, pagination = users_service.list_company_admins(
            db.session, page, per_page,
            search=request.args.get('search'),
            status=request.args.get('status'),
        )
        return ok([a.to_dict() for a in admins], pagination=pagination)
    except Exception as e:
        return server_error(logger, 'Failed to fetch company admins', e)


@admin_bp.route('/company-admins', methods=['POST'])
@token_required
@role_required([PLATFORM_ADMIN])
@validate_body(CreateCompanyAdminSchema)
def create_company_admin():
    try:
        admin = users_service.create_company_admin(db.session, g.body.model_dump())
        db.session.commit()
        return ok(admin.to_dict(), 201, message='Company admin created successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to create company admin', e)


@admin_bp.route('/company-admins/<int:admin_id>', methods=['PUT'])
@token_required
@role_required([PLATFORM_ADMIN])
@validate_body(UpdateCompanyAdminSchema)
def update_company_admin(admin_id):
    try:
        admin = users_service.update_company_admin(db.session, admin_id, g.body.model_dump(exclude_unset=True))
        db.session.commit()
        return ok(admin.to_dict(), message='Company admin updated successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to update company admin', e)


@admin_bp.route('/company-admins/<int:admin_id>', methods=['DELETE'])
@token_required
@role_required([PLATFORM_ADMIN])
def delete_company_admin(admin_id):
    try:
        admin = users_service.delete_company_admin(db.session, admin_id)
        db.session.commit()
        return ok({'id': admin.id, 'full_name': admin.full_name}, message='Company admin deleted successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to delete company admin', e)


# -----------------------------
# Dashboards
# -----------------------------
@admin_bp.route('/dashboard/overview', methods=['GET'])
@token_required
@role_required([PLATFORM_ADMIN])
def dashboard_overview():
    try:
        return ok(dashboard_service.overview(db.session))
    except Exception as e:
        return server_error(logger, 'Failed to fetch dashboard data', e)


@admin_bp.route('/dashboard/company', methods=['GET'])
@token_required
@role_required(ADMIN_ROLES)
def dashboard_company():
    try:
        data = dashboard_service.company_dashboard(db.session, g.user, query_int('company_id'))
        return ok(data)
    except ServiceError as e:
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to fetch company dashboard', e)


@admin_bp.route('/dashboard/employee', methods=['GET'])
@token_required
@role_required([EMPLOYEE])
def dashboard_employee():
    try:
        return ok(dashboard_service.employee_dashboard(db.session, g.user))
    except Exception as e:
        return server_error(logger, 'Failed to fetch employee dashboard', e)
