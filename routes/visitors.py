import logging

from flask import Blueprint, current_app, g, request

from models import db
from models.user import PLATFORM_ADMIN
from schemas.visitors import CreateVisitorSchema, UpdateVisitorSchema
from services import visitors as visitors_service
from services.errors import ServiceError
from utils.decorators import token_required, role_required
from utils.responses import ok, server_error, service_fail
from utils.validators import query_int, validate_body

logger = logging.getLogger('routes.visitors')

visitors_bp = Blueprint('visitors', __name__)


@visitors_bp.route('/search/<phone>', methods=['GET'])
@token_required
def search_visitors(phone):
    try:
        visitors = visitors_service.search_by_phone(db.session, phone)
        return ok([v.to_dict() for v in visitors], count=len(visitors))
    except ServiceError as e:
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to search visitors', e)


@visitors_bp.route('/<int:visitor_id>', methods=['GET'])
@token_required
def get_visitor(visitor_id):
    try:
        return ok(visitors_service.get_visitor(db.session, visitor_id).to_dict())
    except ServiceError as e:
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to fetch visitor', e)


@visitors_bp.route('', methods=['POST'])
@token_required
@validate_body(CreateVisitorSchema)
def create_visitor():
    body = g.body
    try:
        visitor = visitors_service.create_visitor(db.session, body.phone, body.model_dump())
        db.session.commit()
        logger.info("Visitor %s registered by user %s", visitor.id, g.user.id)
        return ok(visitor.to_dict(), 201, message='Visitor created successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to create visitor', e)


@visitors_bp.route('/<int:visitor_id>', methods=['PUT'])
@token_required
@validate_body(UpdateVisitorSchema)
def update_visitor(visitor_id):
    try:
        visitor = visitors_service.update_visitor(db.session, visitor_id, g.body.model_dump(exclude_unset=True))
        db.session.commit()
        return ok(visitor.to_dict(), message='Visitor updated successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to update visitor', e)


@visitors_bp.route('', methods=['GET'])
@token_required
@role_required([PLATFORM_ADMIN])
def list_visitors():
    page = query_int('page', 1, minimum=1)
    try:
        visitors, pagination = visitors_service.list_visitors(
            db.session, page, current_app.config['PAGE_SIZE'], search_term=request.args.get('search'),
        )
        return ok([v.to_dict() for v in visitors], pagination=pagination)
    except Exception as e:
        return server_error(logger, 'Failed to fetch visitors', e)


@visitors_bp.route('/stats/overview', methods=['GET'])
@token_required
@role_required([PLATFORM_ADMIN])
def visitor_stats():
    try:
        return ok(visitors_service.visitor_stats(db.session))
    except Exception as e:
        return server_error(logger, 'Failed to fetch visitor statistics', e)


@visitors_bp.route('/<int:visitor_id>', methods=['DELETE'])
@token_required
@role_required([PLATFORM_ADMIN])
def delete_visitor(visitor_id):
    try:
        visitors_service.delete_visitor(db.session, visitor_id)
        db.session.commit()
        logger.info("Visitor %s deleted by %s", visitor_id, g.user.id)
        return ok({'id': visitor_id}, message='Visitor deleted successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to delete visitor', e)
