# =============================================================================
# AgriManage Backend
# errors.py - Application Error Types
#
# Exceptions raised by the services and persistence layer. Each carries the
# HTTP status it maps to; the application factory renders them as JSON.
# =============================================================================


class AppError(Exception):
    """
    Base class for all application errors.

    Attributes:
        status_code: HTTP status used when the error reaches a route
        title: Short error name placed in the 'error' field of the response
        message: Human readable message
        details: Optional extra information (missing fields, counts, ...)
    """
    status_code = 500
    title = 'Application Error'

    def __init__(self, message=None, details=None):
        super().__init__(message or self.title)
        self.message = message or self.title
        self.details = details

    def to_dict(self):
        data = {
            'success': False,
            'error': self.title,
            'message': self.message
        }
        if self.details:
            data['details'] = self.details
        return data


class ValidationError(AppError):
    """Bad or missing input, or a value outside its allowed set."""
    status_code = 400
    title = 'Validation Error'


class UnexpectedShapeError(AppError):
    """A payload had the wrong structure (object vs. list, etc.)."""
    status_code = 400
    title = 'Unexpected Shape'


class NotFound(AppError):
    status_code = 404
    title = 'Not Found'


class ReferentialIntegrityError(AppError):
    """Delete refused because child records still reference the parent."""
    status_code = 409
    title = 'Conflict'


class PersistenceError(AppError):
    """The store was unreachable or rejected the write."""
    status_code = 503
    title = 'Persistence Error'


class AuthenticationError(AppError):
    """Missing, expired or rejected credentials."""
    status_code = 401
    title = 'Unauthorized'


class AuthorizationError(AppError):
    """The caller is known but not allowed to do this."""
    status_code = 403
    title = 'Forbidden'
