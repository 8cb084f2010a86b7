# =============================================================================
# AgriManage Backend
# routes/locations.py - Location Routes
#
# CRUD endpoints for farm locations, the crops allocated on them, area
# allocation summaries, and the location report export.
# =============================================================================

from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from agrimanage.constants import LOCATION_REPORT_COLUMNS
from agrimanage.extensions import limiter
from agrimanage.models import Location
from agrimanage.decorators import paginated_response, json_body
from agrimanage.services.relations import locations, crops_for_location, allocation_summary
from agrimanage.services.reports import build_report, render_csv
from agrimanage.utils import paginate_query, success_response, csv_download

locations_bp = Blueprint('locations', __name__)


def _search(query):
    search = request.args.get('search', '').strip()
    if search:
        query = query.filter(Location.city.ilike(f'%{search}%'))
    return query


# =============================================================================
# List Locations
# =============================================================================

@locations_bp.route('/', methods=['GET'])
@limiter.limit("100 per minute")
@paginated_response(default_per_page=20, max_per_page=100)
def list_locations(page, per_page):
    """
    List locations with optional search and pagination.

    Query Parameters:
        search (str): Matches the city name
        page (int): Page number (default: 1)
        per_page (int): Items per page (default: 20, max: 100)

    Returns:
        200: Paginated list of locations
    """
    query = _search(locations.query()).order_by(Location.city.asc(), Location.id.asc())
    return success_response(data=paginate_query(query, page, per_page))


@locations_bp.route('/report', methods=['GET'])
@limiter.limit("20 per minute")
def location_report():
    records = [loc.to_dict() for loc in _search(locations.query()).order_by(Location.id).all()]
    rows = build_report(records, LOCATION_REPORT_COLUMNS)
    return csv_download(render_csv(rows, LOCATION_REPORT_COLUMNS), 'location_report.csv')


# =============================================================================
# Single Location
# =============================================================================

@locations_bp.route('/<int:location_id>', methods=['GET'])
@limiter.limit("100 per minute")
def get_location(location_id):
    return success_response(data=locations.get_by_id(location_id).to_dict())


@locations_bp.route('/<int:location_id>/crops', methods=['GET'])
@limiter.limit("100 per minute")
def get_location_crops(location_id):
    """All crops on a location; an unknown location gives an empty list."""
    return success_response(data=[c.to_dict() for c in crops_for_location(location_id)])


@locations_bp.route('/<int:location_id>/allocation', methods=['GET'])
@limiter.limit("100 per minute")
def get_location_allocation(location_id):
    """
    Area allocation summary for a location.

    Returns:
        200: capacity, allocated and remaining area
        404: Location not found
    """
    location = locations.get_by_id(location_id)
    return success_response(data=allocation_summary(location))


# =============================================================================
# Create / Update / Delete
# =============================================================================

@locations_bp.route('/', methods=['POST'])
@jwt_required()
@limiter.limit("30 per minute")
@json_body
def create_location(data):
    """
    Create a location.

    Request Body:
        province, district, city (str): required
        areaSize (str | number | object): required, e.g. "2.5 acres"
        latitude, longitude (number): optional
        soilType, irrigationType (str): optional

    Returns:
        201: Created location
        400: Validation error
    """
    location = locations.create(data)
    return jsonify({
        'success': True,
        'message': 'Location created',
        'data': location.to_dict()
    }), 201


@locations_bp.route('/<int:location_id>', methods=['PUT'])
@jwt_required()
@limiter.limit("30 per minute")
@json_body
def update_location(location_id, data):
    location = locations.update(location_id, data)
    return success_response(data=location.to_dict(), message='Location updated')


@locations_bp.route('/<int:location_id>', methods=['DELETE'])
@jwt_required()
@limiter.limit("30 per minute")
def delete_location(location_id):
    """
    Delete a location.

    Returns:
        200: Location deleted
        404: Location not found
        409: Crops are still allocated on the location
    """
    locations.delete(location_id)
    return success_response(message='Location deleted')
