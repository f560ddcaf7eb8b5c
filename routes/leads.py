import logging

from flask import Blueprint, current_app, g, make_response, request

from models import db
from models.user import PLATFORM_ADMIN, COMPANY_ADMIN
from schemas.leads import CreateLeadSchema, UpdateLeadSchema
from services import leads as leads_service
from services.errors import ServiceError
from utils.clock import utc_today
from utils.decorators import token_required, role_required
from utils.responses import ok, server_error, service_fail
from utils.validators import query_date, query_int, validate_body

logger = logging.getLogger('routes.leads')

leads_bp = Blueprint('leads', __name__)


def lead_filters():
    """List/export filters from the query string. Scoping decides which ones count."""
    return {
        'date_from': query_date('date_from'),
        'date_to': query_date('date_to'),
        'company_id': query_int('company_id'),
        'employee_id': query_int('employee_id'),
        'search': request.args.get('search') or None,
    }


def created_lead_payload(lead, visitor):
    data = lead.to_dict()
    data['visitor'] = visitor.summary()
    return data


@leads_bp.route('', methods=['POST'])
@token_required
@validate_body(CreateLeadSchema)
def create_lead():
    try:
        lead, visitor = leads_service.create_lead(db.session, g.user, g.body.model_dump())
        db.session.commit()
        logger.info("Lead %s captured by user %s for company %s", lead.id, g.user.id, lead.company_id)
        return ok(created_lead_payload(lead, visitor), 201, message='Lead created successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to create lead', e)


@leads_bp.route('', methods=['GET'])
@token_required
def list_leads():
    page = query_int('page', 1, minimum=1)
    try:
        leads, pagination = leads_service.list_leads(
            db.session, g.user, page, current_app.config['PAGE_SIZE'], filters=lead_filters(),
        )
        return ok([lead.to_dict(with_relations=True) for lead in leads], pagination=pagination)
    except ServiceError as e:
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to fetch leads', e)


@leads_bp.route('/<int:lead_id>', methods=['GET'])
@token_required
def get_lead(lead_id):
    try:
        lead = leads_service.get_lead(db.session, g.user, lead_id)
        return ok(lead.to_dict(with_relations=True))
    except ServiceError as e:
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to fetch lead', e)


@leads_bp.route('/<int:lead_id>', methods=['PUT'])
@token_required
@validate_body(UpdateLeadSchema)
def update_lead(lead_id):
    try:
        lead = leads_service.update_lead(db.session, g.user, lead_id, g.body.model_dump(exclude_unset=True))
        db.session.commit()
        return ok(lead.to_dict(), message='Lead updated successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to update lead', e)


@leads_bp.route('/<int:lead_id>', methods=['DELETE'])
@token_required
@role_required([PLATFORM_ADMIN, COMPANY_ADMIN])
def delete_lead(lead_id):
    try:
        leads_service.delete_lead(db.session, g.user, lead_id)
        db.session.commit()
        logger.info("Lead %s deleted by %s", lead_id, g.user.id)
        return ok({'id': lead_id}, message='Lead deleted successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to delete lead', e)


@leads_bp.route('/stats/overview', methods=['GET'])
@token_required
def lead_stats():
    try:
        return ok(leads_service.lead_stats(db.session, g.user, query_int('company_id')))
    except Exception as e:
        return server_error(logger, 'Failed to fetch lead statistics', e)


@leads_bp.route('/export/csv', methods=['GET'])
@token_required
def export_csv():
    try:
        content = leads_service.export_leads_csv(db.session, g.user, lead_filters())
    except ServiceError as e:
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to export leads', e)

    output = make_response(content)
    output.headers["Content-Disposition"] = f"attachment; filename=leads_{utc_today().isoformat()}.csv"
    output.headers["Content-type"] = "text/csv"
    return output
