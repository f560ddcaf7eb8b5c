from flask import current_app, jsonify

from models import db


def ok(data=None, code=200, message=None, pagination=None, **extra):
    payload = {"data": data}
    if message:
        payload["message"] = message
    if pagination is not None:
        payload["pagination"] = pagination
    payload.update(extra)
    return jsonify(payload), code


def fail(error="Bad Request", code=400, details=None, **extra):
    payload = {"error": error}
    if details is not None:
        payload["details"] = details
    payload.update(extra)
    return jsonify(payload), code


def service_fail(exc):
    """Render a services.errors.ServiceError."""
    return fail(exc.message, exc.status_code, details=exc.details, **exc.extra)


def server_error(logger, error, exc):
    """Roll back, log with traceback and answer 500; exception text only in DEBUG."""
    db.session.rollback()
    logger.error("%s: %s", error, exc, exc_info=True)
    details = str(exc) if current_app.debug else None
    return fail(error, 500, details=details)
