# =============================================================================
# AgriManage Backend
# routes/auth.py - Authentication Routes
#
# Handles user registration, login, token refresh and profile management.
# Uses JWT tokens for stateless authentication.
# =============================================================================

from datetime import datetime, timezone
from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity
)

from agrimanage.extensions import db, bcrypt, limiter
from agrimanage.models import User
from agrimanage.utils import (
    validate_email,
    validate_password,
    current_user_id,
    success_response,
    error_response
)
from agrimanage.decorators import json_body, handle_db_errors

auth_bp = Blueprint('auth', __name__)

SELF_SERVICE_ROLES = ('user', 'farmer')


def _text(data, key):
    value = data.get(key) or ''
    return str(value).strip()


# =============================================================================
# User Registration
# =============================================================================

@auth_bp.route('/register', methods=['POST'])
@limiter.limit("5 per minute")
@json_body
@handle_db_errors
def register(data):
    """
    Register a new user account.

    Request Body:
        email (str): User's email address (required)
        password (str): User's password (required, min 8 chars)
        first_name (str): User's first name (optional)
        last_name (str): User's last name (optional)
        phone (str): User's phone number (optional)
        role (str): 'user' or 'farmer' (optional, default 'user')

    Returns:
        201: User registered successfully with tokens
        400: Validation error
        409: Email already exists
    """
    email = _text(data, 'email').lower()
    password = data.get('password') or ''
    role = _text(data, 'role').lower() or 'user'

    if not email:
        return error_response('Email is required')
    if not validate_email(email):
        return error_response('Invalid email format')

    if User.query.filter_by(email=email).first():
        return error_response('Email already registered', error='Conflict', status_code=409)

    if not password:
        return error_response('Password is required')
    is_valid, password_message = validate_password(password)
    if not is_valid:
        return error_response(password_message)

    if role not in SELF_SERVICE_ROLES:
        return error_response(f"Role must be one of: {', '.join(SELF_SERVICE_ROLES)}")

    user = User(
        email=email,
        password_hash=bcrypt.generate_password_hash(password).decode('utf-8'),
        first_name=_text(data, 'first_name') or None,
        last_name=_text(data, 'last_name') or None,
        phone=_text(data, 'phone') or None,
        photo_url=_text(data, 'photo_url') or None,
        is_active=True,
        role=role
    )

    db.session.add(user)
    db.session.commit()

    current_app.logger.info(f"New user registered: {email}")

    return jsonify({
        'success': True,
        'message': 'Registration successful',
        'access_token': create_access_token(identity=str(user.id)),
        'refresh_token': create_refresh_token(identity=str(user.id)),
        'user': user.to_dict()
    }), 201


# =============================================================================
# User Login
# =============================================================================

@auth_bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
@json_body
@handle_db_errors
def login(data):
    """
    Authenticate user and return JWT tokens.

    Returns:
        200: Login successful with tokens
        400: Missing credentials
        401: Invalid credentials
        403: Account inactive
    """
    email = _text(data, 'email').lower()
    password = data.get('password') or ''

    if not email or not password:
        return error_response('Email and password are required')

    user = User.query.filter_by(email=email).first()

    if not user or not bcrypt.check_password_hash(user.password_hash, password):
        return error_response('Invalid email or password', error='Unauthorized', status_code=401)

    if not user.is_active:
        return error_response(
            'Account is deactivated. Please contact support.',
            error='Forbidden',
            status_code=403
        )

    user.last_login = datetime.now(timezone.utc)
    db.session.commit()

    current_app.logger.info(f"User logged in: {email}")

    return jsonify({
        'success': True,
        'message': 'Login successful',
        'access_token': create_access_token(identity=str(user.id)),
        'refresh_token': create_refresh_token(identity=str(user.id)),
        'user': user.to_dict()
    }), 200


# =============================================================================
# Token Refresh
# =============================================================================

@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    """Issue a new access token from a refresh token."""
    identity = get_jwt_identity()

    user = db.session.get(User, int(identity))
    if not user or not user.is_active:
        return error_response('User not found or inactive', error='Unauthorized', status_code=401)

    return jsonify({
        'success': True,
        'access_token': create_access_token(identity=identity)
    }), 200


# =============================================================================
# Current User Profile
# =============================================================================

@auth_bp.route('/profile', methods=['GET'])
@jwt_required()
def get_profile():
    user = db.session.get(User, current_user_id())

    if not user:
        return error_response('User not found', error='Not Found', status_code=404)

    return success_response(data=user.to_dict())


@auth_bp.route('/profile', methods=['PUT'])
@jwt_required()
@json_body
@handle_db_errors
def update_profile(data):
    """
    Update current user's profile information.

    Request Body:
        first_name, last_name, phone, photo_url (all optional)

    Returns:
        200: Profile updated successfully
        404: User not found
    """
    user = db.session.get(User, current_user_id())

    if not user:
        return error_response('User not found', error='Not Found', status_code=404)

    for field in ('first_name', 'last_name', 'phone', 'photo_url'):
        if field in data:
            setattr(user, field, _text(data, field) or None)

    db.session.commit()

    return success_response(
        data=user.to_dict(),
        message='Profile updated successfully'
    )
