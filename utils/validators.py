from datetime import date
from functools import wraps

from flask import request, g
from pydantic import ValidationError as SchemaError

from services.errors import ValidationError
from utils.responses import fail


def _error_details(exc):
    return [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]


def validate_body(schema):
    """Parse the JSON body with a pydantic schema and expose it as g.body."""
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            data = request.get_json(silent=True)
            if data is None:
                data = {}
            if not isinstance(data, dict):
                return fail("Validation failed", 400, details=[{"field": "", "message": "JSON object expected"}])
            try:
                g.body = schema.model_validate(data)
            except SchemaError as e:
                return fail("Validation failed", 400, details=_error_details(e))
            return f(*args, **kwargs)
        return decorated
    return decorator


def require_one_of(data: dict, fields: list):
    present = any(data.get(f) not in (None, "", []) for f in fields)
    if not present:
        return fail(f"One of {', '.join(fields)} is required", 400,
                    details=[{"field": f, "message": "required_one_of"} for f in fields])
    return None


def query_int(name, default=None, minimum=None):
    """Read an integer query parameter, falling back to default on junk input."""
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def query_date(name):
    """Read a YYYY-MM-DD query parameter; malformed values are a validation error."""
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        raise ValidationError("Validation failed", details=[{"field": name, "message": "Expected a date in YYYY-MM-DD format"}])
