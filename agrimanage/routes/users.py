# =============================================================================
# AgriManage Backend
# routes/users.py - User Administration Routes
#
# Administrative endpoints for user management and record counts.
# Requires admin role.
# =============================================================================

from flask import Blueprint, request, current_app

from agrimanage.constants import USER_ROLES
from agrimanage.extensions import db, limiter
from agrimanage.errors import ReferentialIntegrityError
from agrimanage.models import User, Plant, Disease, Location, Crop, Calculation
from agrimanage.utils import (
    admin_required,
    paginate_query,
    success_response,
    error_response
)
from agrimanage.decorators import paginated_response, json_body, handle_db_errors

users_bp = Blueprint('users', __name__)


# =============================================================================
# List Users
# =============================================================================

@users_bp.route('/', methods=['GET'])
@admin_required
@limiter.limit("30 per minute")
@paginated_response(default_per_page=50)
def get_all_users(page, per_page):
    """
    Get list of all registered users (admin only).

    Query Parameters:
        page (int): Page number
        per_page (int): Items per page
        search (str): Search by email or name
        role (str): Filter by role
        active (bool): Filter by active status

    Returns:
        200: Paginated list of users
    """
    query = User.query

    search = request.args.get('search', '').strip()
    if search:
        query = query.filter(
            db.or_(
                User.email.ilike(f'%{search}%'),
                User.first_name.ilike(f'%{search}%'),
                User.last_name.ilike(f'%{search}%')
            )
        )

    role = request.args.get('role', '').strip().lower()
    if role:
        query = query.filter(User.role == role)

    active = request.args.get('active')
    if active is not None:
        query = query.filter(User.is_active == (active.lower() == 'true'))

    query = query.order_by(User.created_at.desc(), User.id.desc())

    return success_response(data=paginate_query(query, page, per_page))


# =============================================================================
# Record Counts
# =============================================================================

@users_bp.route('/stats', methods=['GET'])
@admin_required
@limiter.limit("30 per minute")
def get_stats():
    """
    Counts of users and of every managed record type.

    Returns:
        200: users (total/active) plus plant, disease, location, crop and
            calculation totals
    """
    return success_response(data={
        'users': {
            'total': User.query.count(),
            'active': User.query.filter_by(is_active=True).count()
        },
        'plants': Plant.query.count(),
        'diseases': Disease.query.count(),
        'locations': Location.query.count(),
        'crops': Crop.query.count(),
        'calculations': Calculation.query.count()
    })


# =============================================================================
# Single User
# =============================================================================

@users_bp.route('/<int:user_id>', methods=['GET'])
@admin_required
@limiter.limit("60 per minute")
def get_user(user_id):
    user = db.session.get(User, user_id)

    if not user:
        return error_response('User not found', error='Not Found', status_code=404)

    user_data = user.to_dict()
    user_data['calculation_count'] = Calculation.query.filter_by(user_id=user_id).count()

    return success_response(data=user_data)


@users_bp.route('/<int:user_id>', methods=['PUT'])
@admin_required
@limiter.limit("30 per minute")
@json_body
@handle_db_errors
def update_user(user_id, data):
    """
    Update user account status or role.

    Request Body:
        is_active (bool): Account active status
        role (str): user, farmer or admin

    Returns:
        200: User updated
        400: Unknown role
        404: User not found
    """
    user = db.session.get(User, user_id)

    if not user:
        return error_response('User not found', error='Not Found', status_code=404)

    if 'role' in data:
        role = str(data['role'] or '').strip().lower()
        if role not in USER_ROLES:
            return error_response(f"Role must be one of: {', '.join(USER_ROLES)}")
        user.role = role

    if 'is_active' in data:
        user.is_active = bool(data['is_active'])

    db.session.commit()

    current_app.logger.info(f"User {user_id} updated by admin")

    return success_response(
        data=user.to_dict(),
        message='User updated successfully'
    )


@users_bp.route('/<int:user_id>', methods=['DELETE'])
@admin_required
@limiter.limit("10 per minute")
@handle_db_errors
def delete_user(user_id):
    """
    Delete a user account.

    Users with saved calculations are kept so the calculation history
    stays intact; deactivate them instead.

    Returns:
        200: User deleted
        400: Cannot delete admin
        404: User not found
        409: The user has saved calculations
    """
    user = db.session.get(User, user_id)

    if not user:
        return error_response('User not found', error='Not Found', status_code=404)

    if user.role == 'admin':
        return error_response('Cannot delete admin accounts')

    calculation_count = user.calculations.count()
    if calculation_count:
        raise ReferentialIntegrityError(
            f'User still has {calculation_count} saved calculation(s); deactivate the account instead',
            details={'dependents': 'Calculation', 'count': calculation_count}
        )

    db.session.delete(user)
    db.session.commit()

    current_app.logger.info(f"User {user_id} deleted by admin")

    return success_response(message='User deleted successfully')
