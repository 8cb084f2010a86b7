# =============================================================================
# AgriManage Backend
# routes/calculator.py - Cost Calculator Routes
#
# Runs cost estimations for the signed-in user and serves their
# calculation history. Calculations are append-only.
# =============================================================================

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from agrimanage.constants import WATER_RESOURCE_LEVELS, SOIL_TYPES
from agrimanage.extensions import db, limiter
from agrimanage.errors import NotFound
from agrimanage.models import Plant
from agrimanage.decorators import json_body, log_request, rate_limit_key_user
from agrimanage.services.calculator import (
    calculations,
    get_cost_table,
    record_calculation,
    user_history
)
from agrimanage.utils import active_user_required, current_user_id, success_response

calculator_bp = Blueprint('calculator', __name__)


# =============================================================================
# Calculator Options
# =============================================================================

@calculator_bp.route('/options', methods=['GET'])
@limiter.limit("100 per minute")
def get_options():
    """
    Values accepted by the calculator.

    Returns:
        200: water resource levels, soil types and the known crops (cost
            table crops plus plant names)
    """
    table = get_cost_table()
    plant_names = [name for (name,) in db.session.query(Plant.name).order_by(Plant.name).all()]

    crops = list(table.known_crops)
    seen = {crop.lower() for crop in crops}
    for name in plant_names:
        if name.lower() not in seen:
            seen.add(name.lower())
            crops.append(name)

    return success_response(data={
        'waterResources': list(WATER_RESOURCE_LEVELS),
        'soilTypes': list(SOIL_TYPES),
        'crops': crops
    })


# =============================================================================
# Run a Calculation
# =============================================================================

@calculator_bp.route('/calculate', methods=['POST'])
@jwt_required()
@active_user_required
@limiter.limit("20 per minute", key_func=rate_limit_key_user)
@log_request
@json_body
def calculate(data):
    """
    Estimate cultivation cost and store the result in the user's history.

    Headers:
        Authorization: Bearer <access_token>

    Request Body:
        crop (str): Plant name or a crop from the cost table
        area (number): Area in acres, greater than zero
        waterResources (str): Abundant, Moderate, Scarce or Limited
        soilType (str): Fertile, Moderately Fertile, Poor, Sandy or Rich

    Returns:
        201: The stored calculation
        400: Invalid request or unknown crop
        401: Not authenticated
    """
    calculation = record_calculation(current_user_id(), data)
    return jsonify({
        'success': True,
        'message': 'Calculation saved',
        'data': calculation.to_dict()
    }), 201


# =============================================================================
# History
# =============================================================================

@calculator_bp.route('/userCalculations', methods=['GET'])
@jwt_required()
@limiter.limit("60 per minute")
def get_user_calculations():
    """Current user's calculations, oldest first."""
    history = user_history(current_user_id())
    return success_response(data=[c.to_dict() for c in history])


@calculator_bp.route('/<int:calculation_id>', methods=['GET'])
@jwt_required()
@limiter.limit("60 per minute")
def get_calculation(calculation_id):
    """
    A single calculation of the current user.

    Calculations of other users are reported as not found.
    """
    calculation = calculations.get_by_id(calculation_id)
    if calculation.user_id != current_user_id():
        raise NotFound('Calculation not found')
    return success_response(data=calculation.to_dict())
