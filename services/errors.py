"""
Business-rule failures raised by the service layer.

Route handlers catch ServiceError and turn it into a JSON error body with the
matching HTTP status; anything else is treated as an internal error.
"""


class ServiceError(Exception):
    status_code = 400

    def __init__(self, message, details=None, **extra):
        super().__init__(message)
        self.message = message
        self.details = details
        self.extra = extra


class ValidationError(ServiceError):
    status_code = 400


class InvalidCompanyError(ServiceError):
    status_code = 400


class AuthenticationError(ServiceError):
    status_code = 401


class ForbiddenError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409
