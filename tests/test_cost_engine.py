import json

import pytest

from agrimanage.constants import SOIL_TYPES, WATER_RESOURCE_LEVELS
from agrimanage.errors import UnexpectedShapeError, ValidationError
from agrimanage.services.cost_engine import CostTable, estimate_cost, validate_request


def test_rice_on_sandy_soil_with_scarce_water():
    result = estimate_cost('Rice', 2, 'Scarce', 'Sandy')

    assert result['estimatedCost'] == 189280.0
    assert result['crop'] == 'Rice'
    assert result['waterResources'] == 'Scarce'
    assert result['soilType'] == 'Sandy'


def test_estimate_is_deterministic():
    first = estimate_cost('Tomato', 1.5, 'Moderate', 'Fertile')
    second = estimate_cost('Tomato', 1.5, 'Moderate', 'Fertile')
    assert first == second


@pytest.mark.parametrize('water', WATER_RESOURCE_LEVELS)
@pytest.mark.parametrize('soil', SOIL_TYPES)
def test_every_condition_pair_gives_a_full_result(water, soil):
    result = estimate_cost('Maize', 3, water, soil)

    assert result['estimatedCost'] >= 0
    assert result['fertilizerNeeds'].strip()
    assert result['waterNeeds'].strip()


def test_enumerations_match_case_insensitively():
    assert validate_request('rice', '2', 'scarce', 'moderately  fertile') == \
        ('rice', 2.0, 'Scarce', 'Moderately Fertile')


def test_cost_scales_with_area():
    small = estimate_cost('Okra', 1, 'Abundant', 'Fertile')['estimatedCost']
    large = estimate_cost('Okra', 4, 'Abundant', 'Fertile')['estimatedCost']
    assert large == pytest.approx(small * 4)


def test_unknown_crop_uses_default_base_cost():
    result = estimate_cost('Dragon Fruit', 1, 'Abundant', 'Fertile')
    assert result['estimatedCost'] == 50000.0


@pytest.mark.parametrize('kwargs', [
    {'crop': '', 'area': 1, 'water_resources': 'Abundant', 'soil_type': 'Fertile'},
    {'crop': 'Rice', 'area': 0, 'water_resources': 'Abundant', 'soil_type': 'Fertile'},
    {'crop': 'Rice', 'area': -2, 'water_resources': 'Abundant', 'soil_type': 'Fertile'},
    {'crop': 'Rice', 'area': 'much', 'water_resources': 'Abundant', 'soil_type': 'Fertile'},
    {'crop': 'Rice', 'area': 1, 'water_resources': 'Flooded', 'soil_type': 'Fertile'},
    {'crop': 'Rice', 'area': 1, 'water_resources': 'Abundant', 'soil_type': 'Clay'},
])
def test_invalid_requests_are_rejected(kwargs):
    with pytest.raises(ValidationError):
        estimate_cost(**kwargs)


def test_fertilizer_needs_scale_with_area():
    result = estimate_cost('Rice', 2, 'Scarce', 'Sandy')
    assert '220.0 kg' in result['fertilizerNeeds']


def test_area_too_large_for_a_finite_cost():
    with pytest.raises(ValidationError) as excinfo:
        estimate_cost('Rice', 1e308, 'Scarce', 'Sandy')
    assert excinfo.value.details['field'] == 'area'


class TestCostTable:

    def test_mapping_overrides_defaults(self):
        table = CostTable.from_mapping({
            'base_costs': {'Quinoa': 10000},
            'condition_multipliers': {'abundant|rich': 2}
        })

        assert table.knows_crop('QUINOA')
        assert table.knows_crop('rice')
        assert estimate_cost('Quinoa', 1, 'Abundant', 'Rich', table=table)['estimatedCost'] == 20000.0

    def test_bad_section_shape(self):
        with pytest.raises(UnexpectedShapeError):
            CostTable.from_mapping({'base_costs': ['Rice', 52000]})

    def test_bad_multiplier_key(self):
        with pytest.raises(UnexpectedShapeError):
            CostTable.from_mapping({'condition_multipliers': {'Scarce': 1.5}})

    def test_negative_multiplier(self):
        with pytest.raises(ValidationError):
            CostTable.from_mapping({'condition_multipliers': {'Scarce|Poor': -1}})

    @pytest.mark.parametrize('mapping', [
        {'base_costs': {'Rice': 'lots'}},
        {'water_requirements': {'Rice': None}},
        {'fertilizer_rates': {'Poor': [120]}},
        {'condition_multipliers': {'Scarce|Poor': 'high'}},
        {'default_base_cost': 'n/a'},
        {'default_water_requirement': float('inf')},
    ])
    def test_non_numeric_entries(self, mapping):
        with pytest.raises(UnexpectedShapeError):
            CostTable.from_mapping(mapping)

    def test_label_keys_match_case_insensitively(self):
        table = CostTable.from_mapping({
            'fertilizer_levels': {'poor': 'Very high'},
            'irrigation_advice': {'SCARCE': 'Drip irrigation only'}
        })

        assert table.fertilizer_levels['Poor'] == 'Very high'
        assert 'poor' not in table.fertilizer_levels
        result = estimate_cost('Rice', 1, 'Scarce', 'Poor', table=table)
        assert result['fertilizerNeeds'].startswith('Very high:')
        assert result['waterNeeds'].startswith('Drip irrigation only:')

    def test_unknown_label_key(self):
        with pytest.raises(ValidationError):
            CostTable.from_mapping({'fertilizer_levels': {'Clay': 'High'}})

    def test_load_from_file(self, tmp_path):
        path = tmp_path / 'costs.json'
        path.write_text(json.dumps({'base_costs': {'Rice': 60000}}))

        table = CostTable.load(str(path))

        assert table.base_cost('Rice') == 60000.0

    def test_load_without_path_gives_defaults(self):
        assert CostTable.load('').base_cost('rice') == 52000.0

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CostTable.load(str(tmp_path / 'missing.json'))
