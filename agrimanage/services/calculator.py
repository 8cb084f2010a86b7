# =============================================================================
# AgriManage Backend
# services/calculator.py - Cost Calculator Service
#
# Runs the cost estimation for a user and keeps the append-only history of
# their calculations.
# =============================================================================

from flask import current_app

from agrimanage.extensions import db
from agrimanage.errors import ValidationError, UnexpectedShapeError
from agrimanage.models import Calculation, Plant
from agrimanage.services.cost_engine import CostTable, estimate_cost, validate_request
from agrimanage.services.gateway import Repository

calculations = Repository(Calculation, 'Calculation')


def get_cost_table():
    """The application's cost table, falling back to the defaults."""
    return current_app.config.get('COST_TABLE') or CostTable.default()


def is_known_crop(crop, table):
    """A crop is known when it is a plant name or has a cost table entry."""
    if table.knows_crop(crop):
        return True
    match = Plant.query.filter(db.func.lower(Plant.name) == crop.lower()).first()
    return match is not None


def record_calculation(user_id, payload, table=None):
    """
    Estimate the cost for a request and store it in the user's history.

    Args:
        user_id: ID of the requesting user
        payload: dict with crop, area, waterResources, soilType
        table: CostTable to use (defaults to the application's table)

    Returns:
        Calculation: The newly stored, immutable record

    Raises:
        UnexpectedShapeError: payload is not a JSON object
        ValidationError: invalid request or unknown crop
    """
    if not isinstance(payload, dict):
        raise UnexpectedShapeError(
            'Request body must be a JSON object',
            details={'received': type(payload).__name__}
        )

    table = table or get_cost_table()
    crop, area, water_resources, soil_type = validate_request(
        payload.get('crop'),
        payload.get('area'),
        payload.get('waterResources'),
        payload.get('soilType')
    )

    if not is_known_crop(crop, table):
        raise ValidationError(
            f"Unknown crop '{crop}'",
            details={'field': 'crop', 'known_crops': table.known_crops}
        )

    result = estimate_cost(crop, area, water_resources, soil_type, table=table)

    def build():
        calculation = Calculation(
            user_id=user_id,
            crop=result['crop'],
            area=result['area'],
            water_resources=result['waterResources'],
            soil_type=result['soilType'],
            estimated_cost=result['estimatedCost'],
            fertilizer_needs=result['fertilizerNeeds'],
            water_needs=result['waterNeeds']
        )
        db.session.add(calculation)
        return calculation

    calculation = calculations.write(build)

    current_app.logger.info(
        f"Calculation saved: ID={calculation.id}, user={user_id}, "
        f"crop={calculation.crop}, cost={calculation.estimated_cost}"
    )
    return calculation


def user_history(user_id):
    """A user's calculations in the order they were made."""
    return Calculation.query.filter_by(user_id=user_id)\
        .order_by(Calculation.created_at.asc(), Calculation.id.asc())\
        .all()
