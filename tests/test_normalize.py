import math

import pytest

from agrimanage.errors import UnexpectedShapeError, ValidationError
from agrimanage.services.normalize import (
    coerce_float,
    format_area_size,
    normalize_list,
    parse_area_size,
    parse_date,
)


class TestNormalizeList:

    def test_scalar_is_wrapped(self):
        assert normalize_list('Urea') == ['Urea']

    def test_list_keeps_order_and_drops_blanks(self):
        assert normalize_list(['  Urea ', '', None, 'Compost']) == ['Urea', 'Compost']

    def test_none_is_empty(self):
        assert normalize_list(None) == []

    def test_idempotent(self):
        once = normalize_list([' NPK ', 'Urea', ' '])
        assert normalize_list(once) == once

    def test_mapping_is_rejected(self):
        with pytest.raises(UnexpectedShapeError):
            normalize_list({'name': 'Urea'})

    def test_nested_list_is_rejected(self):
        with pytest.raises(UnexpectedShapeError):
            normalize_list(['Urea', ['Compost']])


class TestCoerceFloat:

    def test_numeric_string(self):
        assert coerce_float('2.5', 'area') == 2.5

    def test_blank_is_none(self):
        assert coerce_float('  ', 'area') is None

    @pytest.mark.parametrize('value', ['abc', True, math.nan, math.inf])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(ValidationError):
            coerce_float(value, 'area')

    def test_positive(self):
        with pytest.raises(ValidationError):
            coerce_float(0, 'area', positive=True)

    def test_bounds(self):
        with pytest.raises(ValidationError):
            coerce_float(91, 'latitude', minimum=-90, maximum=90)


class TestParseAreaSize:

    def test_number_then_unit(self):
        assert parse_area_size('5.5 acres') == (5.5, 'acres')

    def test_separators_are_trimmed(self):
        assert parse_area_size('- 3 acres') == (3.0, 'acres')

    def test_only_first_number_counts(self):
        value, unit = parse_area_size('2 acres 3 perches')
        assert value == 2.0
        assert unit == 'acres 3 perches'

    def test_no_number(self):
        assert parse_area_size('large') == (None, 'large')

    def test_bare_number(self):
        assert parse_area_size(4) == (4.0, '')

    def test_structured_object(self):
        assert parse_area_size({'value': '3', 'unit': ' ha '}) == (3.0, 'ha')

    def test_list_is_rejected(self):
        with pytest.raises(UnexpectedShapeError):
            parse_area_size([1, 'acre'])

    def test_format(self):
        assert format_area_size(3.0, 'ha') == '3 ha'
        assert format_area_size(None, 'ha') == 'ha'


class TestParseDate:

    def test_iso_timestamp(self):
        assert parse_date('2024-03-01T10:00:00Z').isoformat() == '2024-03-01'

    def test_invalid(self):
        with pytest.raises(ValidationError):
            parse_date('01/03/2024')
