# =============================================================================
# AgriManage Backend
# routes/crops.py - Crop Allocation Routes
#
# CRUD endpoints for crops allocated on a location.
# =============================================================================

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from agrimanage.extensions import limiter
from agrimanage.decorators import json_body
from agrimanage.services.relations import (
    crops,
    crops_for_location,
    allocate_crop,
    reallocate_crop
)
from agrimanage.utils import success_response

crops_bp = Blueprint('crops', __name__)


@crops_bp.route('/', methods=['POST'])
@jwt_required()
@limiter.limit("30 per minute")
@json_body
def create_crop(data):
    """
    Allocate a crop on a location.

    Request Body:
        locationId (int): required, must reference an existing location
        cropType (str): required
        allocatedArea (number): required, greater than zero

    Returns:
        201: Created crop
        400: Validation error or not enough area left on the location
    """
    crop = allocate_crop(data)
    return jsonify({
        'success': True,
        'message': 'Crop created',
        'data': crop.to_dict()
    }), 201


@crops_bp.route('/location/<int:location_id>', methods=['GET'])
@limiter.limit("100 per minute")
def get_crops_by_location(location_id):
    return success_response(data=[c.to_dict() for c in crops_for_location(location_id)])


@crops_bp.route('/<int:crop_id>', methods=['GET'])
@limiter.limit("100 per minute")
def get_crop(crop_id):
    return success_response(data=crops.get_by_id(crop_id).to_dict())


@crops_bp.route('/<int:crop_id>', methods=['PUT'])
@jwt_required()
@limiter.limit("30 per minute")
@json_body
def update_crop(crop_id, data):
    """Update crop type or allocated area; locationId is ignored."""
    crop = reallocate_crop(crop_id, data)
    return success_response(data=crop.to_dict(), message='Crop updated')


@crops_bp.route('/<int:crop_id>', methods=['DELETE'])
@jwt_required()
@limiter.limit("30 per minute")
def delete_crop(crop_id):
    crops.delete(crop_id)
    return success_response(message='Crop deleted')
