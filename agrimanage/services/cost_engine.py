# =============================================================================
# AgriManage Backend
# services/cost_engine.py - Cost Estimation Engine
#
# Pure estimation of cultivation cost, fertilizer needs and water needs for
# a crop on a given area. Coefficients come from a CostTable so they can be
# changed or extended without touching the calculation.
# =============================================================================

import json
import math
import os

from agrimanage import constants
from agrimanage.errors import ValidationError, UnexpectedShapeError
from agrimanage.services.normalize import coerce_float


def _crop_key(crop):
    return ' '.join(str(crop).split()).lower()


def _canonical(value, allowed, field):
    """Match value case-insensitively against an enumeration."""
    if isinstance(value, str):
        wanted = ' '.join(value.split()).lower()
        for option in allowed:
            if option.lower() == wanted:
                return option
    raise ValidationError(
        f'{field} must be one of: {", ".join(allowed)}',
        details={'field': field, 'allowed': list(allowed)}
    )


def _number(value, where):
    """Read a numeric cost table entry."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise UnexpectedShapeError(
            f'Cost table entry {where} must be a number',
            details={'entry': where, 'value': value}
        )
    if not math.isfinite(number):
        raise UnexpectedShapeError(
            f'Cost table entry {where} must be a finite number',
            details={'entry': where}
        )
    return number


class CostTable:
    """
    Coefficient table for the cost calculator.

    Attributes:
        base_costs: Cost per acre keyed by lower-case crop name
        condition_multipliers: Multiplier keyed by (water resources, soil type)
        fertilizer_rates: Fertilizer kg per acre keyed by soil type
        fertilizer_levels: Need level label keyed by soil type
        water_requirements: Seasonal water need in mm keyed by crop name
        irrigation_advice: Irrigation advice keyed by water resources
        default_base_cost: Cost per acre for crops without an entry
        default_water_requirement: Water need for crops without an entry
    """

    def __init__(self, base_costs, condition_multipliers, fertilizer_rates,
                 fertilizer_levels, water_requirements, irrigation_advice,
                 default_base_cost, default_water_requirement):
        self.base_costs = {_crop_key(k): float(v) for k, v in base_costs.items()}
        self.condition_multipliers = dict(condition_multipliers)
        self.fertilizer_rates = dict(fertilizer_rates)
        self.fertilizer_levels = dict(fertilizer_levels)
        self.water_requirements = {
            _crop_key(k): float(v) for k, v in water_requirements.items()
        }
        self.irrigation_advice = dict(irrigation_advice)
        self.default_base_cost = float(default_base_cost)
        self.default_water_requirement = float(default_water_requirement)

        for key, multiplier in self.condition_multipliers.items():
            if multiplier < 0:
                raise ValidationError(
                    'Cost multipliers must be non-negative',
                    details={'pair': list(key)}
                )

    @classmethod
    def default(cls):
        return cls(
            base_costs=constants.CROP_BASE_COSTS,
            condition_multipliers=constants.CONDITION_MULTIPLIERS,
            fertilizer_rates=constants.FERTILIZER_RATES,
            fertilizer_levels=constants.FERTILIZER_LEVELS,
            water_requirements=constants.CROP_WATER_REQUIREMENTS,
            irrigation_advice=constants.IRRIGATION_ADVICE,
            default_base_cost=constants.DEFAULT_BASE_COST,
            default_water_requirement=constants.DEFAULT_WATER_REQUIREMENT
        )

    @classmethod
    def from_mapping(cls, data):
        """
        Build a table from a JSON-style mapping layered over the defaults.

        Expected shape (every key optional):
            {
                "base_costs": {"Rice": 52000},
                "condition_multipliers": {"Scarce|Sandy": 1.82},
                "fertilizer_rates": {"Poor": 120},
                "fertilizer_levels": {"Poor": "High"},
                "water_requirements": {"Rice": 1200},
                "irrigation_advice": {"Scarce": "Drip irrigation"},
                "default_base_cost": 50000,
                "default_water_requirement": 600
            }

        Raises:
            UnexpectedShapeError: A section has the wrong structure or an
                entry that should be a number is not one
            ValidationError: A soil type or water level key is unknown
        """
        if not isinstance(data, dict):
            raise UnexpectedShapeError('Cost table must be a JSON object')

        table = cls.default()

        def section(name):
            value = data.get(name, {})
            if not isinstance(value, dict):
                raise UnexpectedShapeError(
                    f'Cost table section "{name}" must be an object',
                    details={'section': name}
                )
            return value

        table.base_costs.update({
            _crop_key(k): _number(v, f'base_costs.{k}')
            for k, v in section('base_costs').items()
        })
        table.water_requirements.update({
            _crop_key(k): _number(v, f'water_requirements.{k}')
            for k, v in section('water_requirements').items()
        })
        table.fertilizer_rates.update({
            _canonical(k, constants.SOIL_TYPES, 'soilType'): _number(v, f'fertilizer_rates.{k}')
            for k, v in section('fertilizer_rates').items()
        })
        table.fertilizer_levels.update({
            _canonical(k, constants.SOIL_TYPES, 'soilType'): str(v)
            for k, v in section('fertilizer_levels').items()
        })
        table.irrigation_advice.update({
            _canonical(k, constants.WATER_RESOURCE_LEVELS, 'waterResources'): str(v)
            for k, v in section('irrigation_advice').items()
        })

        for key, multiplier in section('condition_multipliers').items():
            if '|' not in key:
                raise UnexpectedShapeError(
                    'Condition multiplier keys must look like "Water|Soil"',
                    details={'key': key}
                )
            water, soil = key.split('|', 1)
            pair = (
                _canonical(water, constants.WATER_RESOURCE_LEVELS, 'waterResources'),
                _canonical(soil, constants.SOIL_TYPES, 'soilType')
            )
            multiplier = _number(multiplier, f'condition_multipliers.{key}')
            if multiplier < 0:
                raise ValidationError(
                    'Cost multipliers must be non-negative', details={'key': key}
                )
            table.condition_multipliers[pair] = multiplier

        if 'default_base_cost' in data:
            table.default_base_cost = _number(data['default_base_cost'], 'default_base_cost')
        if 'default_water_requirement' in data:
            table.default_water_requirement = _number(
                data['default_water_requirement'], 'default_water_requirement'
            )

        return table

    @classmethod
    def load(cls, path):
        """Load a JSON override file; an empty path gives the defaults."""
        if not path:
            return cls.default()
        if not os.path.exists(path):
            raise FileNotFoundError(f'Cost table file not found: {path}')
        with open(path, 'r') as f:
            return cls.from_mapping(json.load(f))

    # =========================================================================
    # Lookups
    # =========================================================================

    def knows_crop(self, crop):
        return _crop_key(crop) in self.base_costs

    @property
    def known_crops(self):
        return sorted(self.base_costs)

    def base_cost(self, crop):
        return self.base_costs.get(_crop_key(crop), self.default_base_cost)

    def multiplier(self, water_resources, soil_type):
        try:
            return self.condition_multipliers[(water_resources, soil_type)]
        except KeyError:
            raise ValidationError(
                f'No cost multiplier configured for {water_resources} water '
                f'and {soil_type} soil',
                details={'waterResources': water_resources, 'soilType': soil_type}
            )

    def water_requirement(self, crop):
        return self.water_requirements.get(_crop_key(crop), self.default_water_requirement)


# =============================================================================
# Estimation
# =============================================================================

def validate_request(crop, area, water_resources, soil_type):
    """
    Validate a calculation request and return its canonical values.

    Returns:
        tuple: (crop, area, water_resources, soil_type)

    Raises:
        ValidationError: Empty crop, non-positive area, or an enumerated
            value outside its allowed set
    """
    crop = ' '.join(str(crop).split()) if crop is not None else ''
    if not crop:
        raise ValidationError('crop is required', details={'field': 'crop'})

    area = coerce_float(area, 'area', positive=True)
    if area is None:
        raise ValidationError('area is required', details={'field': 'area'})

    water_resources = _canonical(
        water_resources, constants.WATER_RESOURCE_LEVELS, 'waterResources'
    )
    soil_type = _canonical(soil_type, constants.SOIL_TYPES, 'soilType')

    return crop, area, water_resources, soil_type


def estimate_cost(crop, area, water_resources, soil_type, table=None):
    """
    Estimate cost and resource needs for growing a crop.

    estimatedCost = base cost per acre(crop) * area * multiplier(water, soil)

    Args:
        crop: Crop name
        area: Area in acres (> 0)
        water_resources: One of WATER_RESOURCE_LEVELS
        soil_type: One of SOIL_TYPES
        table: CostTable (defaults to CostTable.default())

    Returns:
        dict: crop, area, waterResources, soilType, estimatedCost,
            fertilizerNeeds, waterNeeds
    """
    table = table or CostTable.default()
    crop, area, water_resources, soil_type = validate_request(
        crop, area, water_resources, soil_type
    )

    multiplier = table.multiplier(water_resources, soil_type)
    estimated_cost = round(max(table.base_cost(crop) * area * multiplier, 0.0), 2)
    if not math.isfinite(estimated_cost):
        raise ValidationError(
            'area is too large to estimate a cost',
            details={'field': 'area', 'area': area}
        )

    fertilizer_rate = table.fertilizer_rates.get(soil_type, 0.0)
    fertilizer_level = table.fertilizer_levels.get(soil_type, 'Standard')
    fertilizer_needs = (
        f'{fertilizer_level}: about {fertilizer_rate * area:,.1f} kg of fertilizer '
        f'({fertilizer_rate:g} kg per acre on {soil_type.lower()} soil)'
    )

    water_mm = table.water_requirement(crop)
    water_m3 = water_mm / 1000.0 * constants.SQUARE_METRES_PER_ACRE * area
    advice = table.irrigation_advice.get(water_resources, 'Irrigate as needed')
    water_needs = (
        f'{advice}: about {water_m3:,.0f} m3 of water per season '
        f'({water_mm:g} mm)'
    )

    return {
        'crop': crop,
        'area': area,
        'waterResources': water_resources,
        'soilType': soil_type,
        'estimatedCost': estimated_cost,
        'fertilizerNeeds': fertilizer_needs,
        'waterNeeds': water_needs
    }
