"""
Employee-only surface used by the mobile capture app.

The company always comes from the token; nothing in a request body or query
string can point an employee at another company.
"""
import logging

from flask import Blueprint, current_app, g, request

from models import db
from schemas.auth import LoginSchema, MobileRegisterSchema, UpdateProfileSchema
from schemas.leads import CreateLeadSchema, UpdateLeadSchema
from services import auth as auth_service
from services import leads as leads_service
from services import visitors as visitors_service
from services.errors import ServiceError
from utils.auth_utils import generate_token
from utils.decorators import token_required, mobile_required
from utils.responses import fail, ok, server_error, service_fail
from utils.validators import query_int, require_one_of, validate_body

logger = logging.getLogger('routes.mobile')

mobile_bp = Blueprint('mobile', __name__)

MOBILE_SEARCH_FIELDS = ("full_name", "phone", "organization")
MOBILE_LEAD_UPDATE_FIELDS = ("notes", "follow_up_date")


@mobile_bp.route('/login', methods=['POST'])
@validate_body(LoginSchema)
def login():
    body = g.body
    try:
        user = auth_service.authenticate_mobile(db.session, body.email, body.password)
        logger.info("Mobile login for employee %s", user.id)
        return ok({'token': generate_token(user), 'user': user.to_dict()}, message='Mobile login successful')
    except ServiceError as e:
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Mobile login failed', e)


@mobile_bp.route('/register', methods=['POST'])
@validate_body(MobileRegisterSchema)
def register():
    if not current_app.config.get('ALLOW_MOBILE_SELF_REGISTRATION'):
        return fail('Self registration is disabled. Ask your company admin for an account.', 403)
    try:
        user = auth_service.register_employee(db.session, g.body.model_dump())
        db.session.commit()
        return ok(user.to_dict(), 201, message='Employee registration successful')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Mobile registration failed', e)


@mobile_bp.route('/profile', methods=['GET'])
@token_required
@mobile_required
def get_profile():
    return ok(g.user.to_dict())


@mobile_bp.route('/profile', methods=['PUT'])
@token_required
@mobile_required
@validate_body(UpdateProfileSchema)
def update_profile():
    try:
        user = auth_service.update_profile(db.session, g.user, g.body.model_dump(exclude_unset=True))
        db.session.commit()
        return ok(user.to_dict(), message='Profile updated successfully')
    except Exception as e:
        return server_error(logger, 'Failed to update profile', e)


@mobile_bp.route('/leads', methods=['POST'])
@token_required
@mobile_required
@validate_body(CreateLeadSchema)
def create_lead():
    payload = g.body.model_dump()
    payload.pop('company_id', None)
    try:
        lead, visitor = leads_service.create_lead(db.session, g.user, payload)
        db.session.commit()
        data = lead.to_dict()
        data['visitor'] = visitor.summary()
        return ok(data, 201, message='Lead created successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to create lead', e)


@mobile_bp.route('/leads', methods=['GET'])
@token_required
@mobile_required
def list_leads():
    page = query_int('page', 1, minimum=1)
    try:
        leads, pagination = leads_service.list_leads(
            db.session, g.user, page, current_app.config['MOBILE_PAGE_SIZE'],
            filters={'search': request.args.get('search') or None},
            search_fields=MOBILE_SEARCH_FIELDS,
        )
        return ok([lead.to_dict(with_relations=True) for lead in leads], pagination=pagination,
                  message='Leads retrieved successfully')
    except Exception as e:
        return server_error(logger, 'Failed to fetch leads', e)


@mobile_bp.route('/leads/<int:lead_id>', methods=['PUT'])
@token_required
@mobile_required
@validate_body(UpdateLeadSchema)
def update_lead(lead_id):
    try:
        # Scoped read first so another employee's lead looks absent
        leads_service.get_lead(db.session, g.user, lead_id)
        lead = leads_service.update_lead(
            db.session, g.user, lead_id, g.body.model_dump(exclude_unset=True),
            allowed=MOBILE_LEAD_UPDATE_FIELDS,
        )
        db.session.commit()
        return ok(lead.to_dict(), message='Lead updated successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to update lead', e)


@mobile_bp.route('/visitors/search', methods=['GET'])
@token_required
@mobile_required
def search_visitors():
    phone = request.args.get('phone')
    full_name = request.args.get('full_name')
    missing = require_one_of({'phone': phone, 'full_name': full_name}, ['phone', 'full_name'])
    if missing:
        return missing
    try:
        visitors = visitors_service.search(db.session, phone=phone, full_name=full_name)
        return ok([v.to_dict() for v in visitors], message='Visitors searched successfully')
    except Exception as e:
        return server_error(logger, 'Failed to search visitors', e)


@mobile_bp.route('/visitors/exists/<phone>', methods=['GET'])
@token_required
@mobile_required
def visitor_exists(phone):
    try:
        visitor = visitors_service.find_by_phone(db.session, phone)
        if not visitor:
            return ok({'exists': False, 'visitor': None})
        return ok({'exists': True, 'visitor': visitors_service.visit_summary(db.session, visitor)})
    except Exception as e:
        return server_error(logger, 'Failed to check visitor existence', e)


@mobile_bp.route('/visitors/phone-suggestions/<query>', methods=['GET'])
@token_required
@mobile_required
def phone_suggestions(query):
    try:
        return ok(visitors_service.phone_suggestions(db.session, query))
    except Exception as e:
        return server_error(logger, 'Failed to get phone suggestions', e)
