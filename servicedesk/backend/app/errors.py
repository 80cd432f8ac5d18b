# servicedesk/backend/app/errors.py


class ServiceDeskError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceDeskError):
    """Malformed input: bad priority, past due date, blank field, unknown role."""

    status_code = 400


class AuthorizationError(ServiceDeskError):
    """Performer is inactive, holds the wrong role, or does not own the resource."""

    status_code = 403


class NotFoundError(ServiceDeskError):
    status_code = 404


class ConflictError(ServiceDeskError):
    """Last-admin removal, duplicate email, or a store-level conflict."""

    status_code = 409
