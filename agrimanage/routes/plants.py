# =============================================================================
# AgriManage Backend
# routes/plants.py - Plant Routes
#
# CRUD endpoints for plants, their diseases, and the plant report export.
# Reads are public; writes require an access token.
# =============================================================================

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from agrimanage.constants import PLANT_REPORT_COLUMNS
from agrimanage.extensions import db, limiter
from agrimanage.models import Plant
from agrimanage.decorators import paginated_response, json_body
from agrimanage.services.relations import plants, diseases_for_plant
from agrimanage.services.reports import build_report, render_csv
from agrimanage.utils import paginate_query, success_response, csv_download

plants_bp = Blueprint('plants', __name__)


def _search(query):
    """Filter plants whose name or date contains the search text."""
    search = request.args.get('search', '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(
            db.or_(
                Plant.name.ilike(pattern),
                db.cast(Plant.date, db.String).ilike(pattern)
            )
        )
    return query


# =============================================================================
# List Plants
# =============================================================================

@plants_bp.route('/', methods=['GET'])
@limiter.limit("100 per minute")
@paginated_response(default_per_page=20, max_per_page=100)
def list_plants(page, per_page):
    """
    List plants with optional search and pagination.

    Query Parameters:
        search (str): Matches plant name or date
        page (int): Page number (default: 1)
        per_page (int): Items per page (default: 20, max: 100)

    Returns:
        200: Paginated list of plants
    """
    query = _search(plants.query()).order_by(Plant.name.asc(), Plant.id.asc())
    return success_response(data=paginate_query(query, page, per_page))


@plants_bp.route('/report', methods=['GET'])
@limiter.limit("20 per minute")
def plant_report():
    """Download all (optionally searched) plants as a CSV report."""
    records = [plant.to_dict() for plant in _search(plants.query()).order_by(Plant.id).all()]
    rows = build_report(records, PLANT_REPORT_COLUMNS)
    return csv_download(render_csv(rows, PLANT_REPORT_COLUMNS), 'plant_report.csv')


# =============================================================================
# Single Plant
# =============================================================================

@plants_bp.route('/<int:plant_id>', methods=['GET'])
@limiter.limit("100 per minute")
def get_plant(plant_id):
    return success_response(data=plants.get_by_id(plant_id).to_dict())


@plants_bp.route('/<int:plant_id>/diseases', methods=['GET'])
@limiter.limit("100 per minute")
def get_plant_diseases(plant_id):
    """All diseases of a plant; an unknown plant gives an empty list."""
    return success_response(data=[d.to_dict() for d in diseases_for_plant(plant_id)])


# =============================================================================
# Create / Update / Delete
# =============================================================================

@plants_bp.route('/', methods=['POST'])
@jwt_required()
@limiter.limit("30 per minute")
@json_body
def create_plant(data):
    """
    Create a plant.

    Request Body:
        name (str): required
        description, climate, soilPh, landPreparation, imageUrl (str)
        date (str): ISO date
        fertilizers (str | list): a single name is stored as a one-item list

    Returns:
        201: Created plant
        400: Validation error
    """
    plant = plants.create(data)
    return jsonify({
        'success': True,
        'message': 'Plant created',
        'data': plant.to_dict()
    }), 201


@plants_bp.route('/<int:plant_id>', methods=['PUT'])
@jwt_required()
@limiter.limit("30 per minute")
@json_body
def update_plant(plant_id, data):
    plant = plants.update(plant_id, data)
    return success_response(data=plant.to_dict(), message='Plant updated')


@plants_bp.route('/<int:plant_id>', methods=['DELETE'])
@jwt_required()
@limiter.limit("30 per minute")
def delete_plant(plant_id):
    """
    Delete a plant.

    Returns:
        200: Plant deleted
        404: Plant not found
        409: The plant still has diseases
    """
    plants.delete(plant_id)
    return success_response(message='Plant deleted')
