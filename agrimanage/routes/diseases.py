# =============================================================================
# AgriManage Backend
# routes/diseases.py - Disease Routes
#
# CRUD endpoints for plant diseases. Every disease belongs to a plant;
# diseases of one plant are listed through /plant/<plant_id>.
# =============================================================================

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from agrimanage.extensions import limiter
from agrimanage.decorators import json_body
from agrimanage.services.relations import diseases, diseases_for_plant
from agrimanage.utils import success_response

diseases_bp = Blueprint('diseases', __name__)


@diseases_bp.route('/', methods=['POST'])
@jwt_required()
@limiter.limit("30 per minute")
@json_body
def create_disease(data):
    """
    Create a disease for a plant.

    Request Body:
        name (str): required
        plantId (int): required, must reference an existing plant
        causalAgent, diseaseTransmission, diseaseSymptoms, control,
        imageUrl (str)
        fertilizers (str | list)

    Returns:
        201: Created disease
        400: Validation error
    """
    disease = diseases.create(data)
    return jsonify({
        'success': True,
        'message': 'Disease created',
        'data': disease.to_dict()
    }), 201


@diseases_bp.route('/plant/<int:plant_id>', methods=['GET'])
@limiter.limit("100 per minute")
def get_diseases_by_plant(plant_id):
    return success_response(data=[d.to_dict() for d in diseases_for_plant(plant_id)])


@diseases_bp.route('/<int:disease_id>', methods=['GET'])
@limiter.limit("100 per minute")
def get_disease(disease_id):
    return success_response(data=diseases.get_by_id(disease_id).to_dict())


@diseases_bp.route('/<int:disease_id>', methods=['PUT'])
@jwt_required()
@limiter.limit("30 per minute")
@json_body
def update_disease(disease_id, data):
    """
    Replace the descriptive fields of a disease.

    plantId cannot be changed and is ignored if present.
    """
    disease = diseases.update(disease_id, data)
    return success_response(data=disease.to_dict(), message='Disease updated')


@diseases_bp.route('/<int:disease_id>', methods=['DELETE'])
@jwt_required()
@limiter.limit("30 per minute")
def delete_disease(disease_id):
    diseases.delete(disease_id)
    return success_response(message='Disease deleted')
