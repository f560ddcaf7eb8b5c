import logging

from flask import Blueprint, g

from models import db
from models.user import PLATFORM_ADMIN
from schemas.auth import (
    ChangePasswordSchema, LoginSchema, RegisterUserSchema, UpdateProfileSchema,
)
from services import auth as auth_service
from services import users as users_service
from services.errors import ServiceError
from utils.auth_utils import generate_token
from utils.decorators import token_required, role_required
from utils.responses import ok, server_error, service_fail
from utils.validators import validate_body

logger = logging.getLogger('routes.auth')

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
@validate_body(LoginSchema)
def login():
    body = g.body
    try:
        user = auth_service.authenticate(db.session, body.email, body.password)
        token = generate_token(user)
        logger.info("User %s logged in", user.id)
        return ok({'token': token, 'user': user.to_dict()}, message='Login successful')
    except ServiceError as e:
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Login failed', e)


@auth_bp.route('/register', methods=['POST'])
@token_required
@role_required([PLATFORM_ADMIN])
@validate_body(RegisterUserSchema)
def register():
    try:
        user = users_service.create_user(db.session, g.user, g.body.model_dump())
        db.session.commit()
        return ok(user.to_dict(), 201, message='User registered successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Registration failed', e)


@auth_bp.route('/profile', methods=['GET'])
@token_required
def get_profile():
    return ok(g.user.to_dict())


@auth_bp.route('/profile', methods=['PUT'])
@token_required
@validate_body(UpdateProfileSchema)
def update_profile():
    try:
        user = auth_service.update_profile(db.session, g.user, g.body.model_dump(exclude_unset=True))
        db.session.commit()
        return ok(user.to_dict(), message='Profile updated successfully')
    except Exception as e:
        return server_error(logger, 'Failed to update profile', e)


@auth_bp.route('/change-password', methods=['PUT'])
@token_required
@validate_body(ChangePasswordSchema)
def change_password():
    body = g.body
    try:
        auth_service.change_password(db.session, g.user, body.current_password, body.new_password)
        db.session.commit()
        logger.info("User %s changed password", g.user.id)
        return ok(None, message='Password changed successfully')
    except ServiceError as e:
        db.session.rollback()
        return service_fail(e)
    except Exception as e:
        return server_error(logger, 'Failed to change password', e)
