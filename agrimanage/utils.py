# =============================================================================
# AgriManage Backend
# utils.py - Utility Functions
#
# Common helpers used across the routes: credential validation,
# authorization decorators, identity lookup and JSON response builders.
# =============================================================================

import re
from functools import wraps
from flask import jsonify, make_response
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity

from agrimanage.extensions import db
from agrimanage.models import User


# =============================================================================
# Validation Functions
# =============================================================================

def validate_email(email: str) -> bool:
    """
    Validate email format using regex pattern.

    Args:
        email: Email address to validate

    Returns:
        bool: True if valid email format, False otherwise
    """
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(pattern, email) is not None


def validate_password(password: str) -> tuple[bool, str]:
    """
    Validate password strength requirements.

    Requirements:
    - At least 8 characters
    - At least 1 uppercase letter
    - At least 1 lowercase letter
    - At least 1 number

    Returns:
        tuple: (is_valid: bool, message: str)
    """
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"
    if not re.search(r'[A-Z]', password):
        return False, "Password must contain at least one uppercase letter"
    if not re.search(r'[a-z]', password):
        return False, "Password must contain at least one lowercase letter"
    if not re.search(r'\d', password):
        return False, "Password must contain at least one number"
    return True, "Password is valid"


# =============================================================================
# Identity
# =============================================================================

def current_user_id() -> int:
    """ID of the user identified by the request's access token."""
    return int(get_jwt_identity())


# =============================================================================
# Authorization Decorators
# =============================================================================

def admin_required(fn):
    """
    Decorator to require admin role for endpoint access.

    Usage:
        @users_bp.route('/')
        @admin_required
        def list_users():
            ...
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        user = db.session.get(User, current_user_id())

        if not user or user.role != 'admin':
            return error_response('Admin access required', error='Forbidden', status_code=403)

        return fn(*args, **kwargs)
    return wrapper


def active_user_required(fn):
    """
    Decorator to require an active user account.

    Usage:
        @calculator_bp.route('/calculate', methods=['POST'])
        @jwt_required()
        @active_user_required
        def calculate():
            ...
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        user = db.session.get(User, current_user_id())

        if not user or not user.is_active:
            return error_response(
                'Account is inactive or deactivated', error='Forbidden', status_code=403
            )

        return fn(*args, **kwargs)
    return wrapper


# =============================================================================
# Response Helpers
# =============================================================================

def success_response(data=None, message=None, status_code=200):
    """
    Create a standardized success response.

    Args:
        data: Response data (dict or list)
        message: Success message
        status_code: HTTP status code (default 200)

    Returns:
        tuple: (response, status_code)
    """
    response = {
        'success': True
    }

    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message

    return jsonify(response), status_code


def error_response(message, error='Bad Request', details=None, status_code=400):
    """
    Create a standardized error response.

    Returns:
        tuple: (response, status_code)
    """
    response = {
        'success': False,
        'error': error,
        'message': message
    }

    if details:
        response['details'] = details

    return jsonify(response), status_code


def paginate_query(query, page, per_page, serializer=None):
    """
    Paginate a SQLAlchemy query into the standard list envelope.

    Args:
        query: SQLAlchemy query object
        page: Current page number
        per_page: Items per page
        serializer: Function to serialize each item (defaults to to_dict)

    Returns:
        dict: items plus pagination metadata
    """
    pagination = query.paginate(page=page, per_page=per_page, error_out=False)

    serializer = serializer or (lambda item: item.to_dict())
    items = [serializer(item) for item in pagination.items]

    return {
        'items': items,
        'page': pagination.page,
        'per_page': pagination.per_page,
        'total': pagination.total,
        'pages': pagination.pages,
        'has_next': pagination.has_next,
        'has_prev': pagination.has_prev
    }


def csv_download(text, filename):
    """Wrap CSV text in an attachment response."""
    response = make_response(text)
    response.headers['Content-Type'] = 'text/csv; charset=utf-8'
    response.headers['Content-Disposition'] = f'attachment; filename={filename}'
    return response
