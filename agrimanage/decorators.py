# =============================================================================
# AgriManage Backend
# decorators.py - Reusable Decorators
#
# Custom decorators for common functionality including pagination,
# request body parsing, error handling, and request logging.
# =============================================================================

from functools import wraps
from flask import request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import IntegrityError, OperationalError

from agrimanage.extensions import db
from agrimanage.errors import UnexpectedShapeError, ValidationError


def paginated_response(default_per_page=20, max_per_page=100):
    """
    Handle pagination parameters for list endpoints.

    Extracts 'page' and 'per_page' from query parameters and validates them.
    Passes validated values to the decorated function as keyword arguments.

    Args:
        default_per_page: Default items per page if not specified
        max_per_page: Maximum allowed items per page

    Usage:
        @plants_bp.route('/', methods=['GET'])
        @paginated_response(default_per_page=20)
        def list_plants(page, per_page):
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            page = request.args.get('page', 1, type=int)
            per_page = request.args.get('per_page', default_per_page, type=int)

            if page < 1:
                raise ValidationError('Page number must be greater than 0')

            # Validate and cap per_page
            if per_page < 1:
                per_page = default_per_page
            if per_page > max_per_page:
                per_page = max_per_page

            kwargs['page'] = page
            kwargs['per_page'] = per_page

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def json_body(f):
    """
    Parse the JSON request body and pass it as the 'data' keyword argument.

    Raises:
        ValidationError: Body missing or not valid JSON
        UnexpectedShapeError: Body is valid JSON but not an object
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError('Request body must be valid JSON')
        if not isinstance(data, dict):
            raise UnexpectedShapeError(
                'Request body must be a JSON object',
                details={'received': type(data).__name__}
            )

        kwargs['data'] = data
        return f(*args, **kwargs)
    return decorated_function


def handle_db_errors(f):
    """
    Handle database errors raised by routes that write through the session.

    Rolls back the session and answers with a JSON error. Application
    errors (ValidationError, NotFound, ...) pass through to the global
    handler untouched.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)

        except IntegrityError as e:
            db.session.rollback()
            current_app.logger.error(f"Database integrity error: {e}")

            error_msg = str(e.orig).lower()
            if 'unique' in error_msg or 'duplicate' in error_msg:
                return jsonify({
                    'success': False,
                    'error': 'Conflict',
                    'message': 'A record with this value already exists'
                }), 409
            return jsonify({
                'success': False,
                'error': 'Bad Request',
                'message': 'Database constraint violation'
            }), 400

        except OperationalError as e:
            db.session.rollback()
            current_app.logger.error(f"Database operational error: {e}")
            return jsonify({
                'success': False,
                'error': 'Persistence Error',
                'message': 'Database is temporarily unavailable'
            }), 503

    return decorated_function


def log_request(f):
    """
    Log incoming request details and the response status.

    Usage:
        @calculator_bp.route('/calculate', methods=['POST'])
        @log_request
        def calculate():
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        current_app.logger.info(
            f"Request: {request.method} {request.path} "
            f"from {request.remote_addr}"
        )

        response = f(*args, **kwargs)

        if isinstance(response, tuple):
            status_code = response[1] if len(response) > 1 else 200
        else:
            status_code = getattr(response, 'status_code', 200)

        current_app.logger.info(
            f"Response: {status_code} for {request.method} {request.path}"
        )

        return response
    return decorated_function


def rate_limit_key_user():
    """
    Rate limit key that uses the user ID when a valid token is present.

    Falls back to the client IP address for anonymous requests.

    Usage:
        @limiter.limit("20 per minute", key_func=rate_limit_key_user)
        def calculate():
            ...
    """
    try:
        verify_jwt_in_request(optional=True)
        user_id = get_jwt_identity()
        if user_id:
            return f"user:{user_id}"
    except (JWTExtendedException, PyJWTError):
        pass

    return request.remote_addr
