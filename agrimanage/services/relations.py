# =============================================================================
# AgriManage Backend
# services/relations.py - Relationship Resolver
#
# Plant -> Diseases and Location -> Crops lookups, plus the area bookkeeping
# used when allocating a location's land to crops.
# =============================================================================

from flask import current_app

from agrimanage.extensions import db
from agrimanage.errors import ValidationError
from agrimanage.models import Plant, Disease, Location, Crop
from agrimanage.services.gateway import Repository
from agrimanage.services.normalize import coerce_float, parse_area_size

# =============================================================================
# Repositories
# =============================================================================

plants = Repository(Plant, 'Plant', children=[(Disease, 'plant_id')])

diseases = Repository(
    Disease,
    'Disease',
    parent_field='plantId',
    parent_model=Plant
)

locations = Repository(Location, 'Location', children=[(Crop, 'location_id')])

crops = Repository(
    Crop,
    'Crop',
    parent_field='locationId',
    parent_model=Location
)

__all__ = [
    'plants', 'diseases', 'locations', 'crops',
    'diseases_for_plant', 'crops_for_location', 'parse_area_size',
    'area_magnitude', 'allocated_area', 'allocation_summary', 'check_allocation',
    'allocate_crop', 'reallocate_crop'
]


# =============================================================================
# Parent -> Children
# =============================================================================

def diseases_for_plant(plant_id):
    """All diseases recorded against a plant; [] when there are none."""
    return diseases.list_by_parent(plant_id)


def crops_for_location(location_id):
    """All crops allocated on a location; [] when there are none."""
    return crops.list_by_parent(location_id)


# =============================================================================
# Area Allocation
# =============================================================================

def area_magnitude(location):
    """
    Numeric area of a location, or None when its area size has no number.

    None means allocation on this location is unbounded.
    """
    if location.area_value is not None:
        return location.area_value
    magnitude, _ = parse_area_size(location.area_size)
    return magnitude


def allocated_area(location_id, exclude_crop_id=None):
    """Sum of allocated areas for a location's crops."""
    query = db.session.query(db.func.coalesce(db.func.sum(Crop.allocated_area), 0.0))
    query = query.filter(Crop.location_id == location_id)
    if exclude_crop_id is not None:
        query = query.filter(Crop.id != exclude_crop_id)
    return float(query.scalar() or 0.0)


def allocation_summary(location):
    """
    Summarize how much of a location's area is allocated to crops.

    Args:
        location: Location record

    Returns:
        dict: capacity, unit, allocated, remaining, crop count and whether
            the allocations exceed the capacity. capacity and remaining are
            None when the location's area size carries no number.
    """
    capacity = area_magnitude(location)
    used = allocated_area(location.id)
    crop_count = Crop.query.filter_by(location_id=location.id).count()

    remaining = None
    over_allocated = False
    if capacity is not None:
        remaining = round(capacity - used, 4)
        over_allocated = used > capacity

    return {
        'locationId': location.id,
        'capacity': capacity,
        'unit': location.area_unit,
        'allocated': round(used, 4),
        'remaining': remaining,
        'cropCount': crop_count,
        'overAllocated': over_allocated
    }


def check_allocation(location, area, exclude_crop_id=None):
    """
    Reject an allocation that would exceed the location's area.

    Only enforced when ENFORCE_CROP_AREA_CAP is enabled and the location
    has a numeric capacity; otherwise every allocation is accepted.

    Raises:
        ValidationError: The allocation does not fit
    """
    if not current_app.config.get('ENFORCE_CROP_AREA_CAP', False):
        return

    capacity = area_magnitude(location)
    if capacity is None:
        return

    used = allocated_area(location.id, exclude_crop_id=exclude_crop_id)
    if used + area > capacity:
        current_app.logger.info(
            f"Crop allocation rejected: location={location.id}, "
            f"requested={area}, allocated={used}, capacity={capacity}"
        )
        raise ValidationError(
            'Allocated area exceeds the remaining area of the location',
            details={
                'capacity': capacity,
                'allocated': used,
                'requested': area,
                'remaining': round(capacity - used, 4)
            }
        )


def allocate_crop(payload):
    """
    Create a crop on a location, honouring the area cap when enabled.

    Returns:
        Crop: The created crop
    """
    if isinstance(payload, dict) and current_app.config.get('ENFORCE_CROP_AREA_CAP', False):
        location_id = _as_id(payload.get('locationId'))
        location = db.session.get(Location, location_id) if location_id is not None else None
        # An unknown location is reported by the repository's parent check
        if location is not None:
            area = coerce_float(payload.get('allocatedArea'), 'allocatedArea', positive=True)
            if area is not None:
                check_allocation(location, area)
    return crops.create(payload)


def reallocate_crop(crop_id, payload):
    """Update a crop, re-checking the area cap when its area changes."""
    crop = crops.get_by_id(crop_id)
    if isinstance(payload, dict) and 'allocatedArea' in payload \
            and current_app.config.get('ENFORCE_CROP_AREA_CAP', False):
        area = coerce_float(payload['allocatedArea'], 'allocatedArea', positive=True)
        if area is not None:
            location = db.session.get(Location, crop.location_id)
            check_allocation(location, area, exclude_crop_id=crop.id)
    return crops.update(crop_id, payload)


def _as_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
