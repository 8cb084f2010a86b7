# =============================================================================
# AgriManage Backend
# services/normalize.py - Input Normalization Helpers
#
# Shape coercion shared by the models and the persistence gateway. Pure
# functions with no Flask or database dependency.
# =============================================================================

import math
import re
from datetime import date, datetime

from agrimanage.errors import ValidationError, UnexpectedShapeError

NUMBER_PATTERN = re.compile(r'(\d+(?:\.\d+)?)')


def normalize_list(value, field='fertilizers'):
    """
    Normalize a submitted list field into an ordered list of strings.

    A scalar is wrapped in a single-element list, blank entries are dropped
    and surrounding whitespace is stripped. Applying the function to its own
    output returns the same list.

    Args:
        value: None, a scalar, or a list/tuple of scalars
        field: Field name used in error messages

    Returns:
        list: Normalized list of non-empty strings

    Raises:
        UnexpectedShapeError: If the value or one of its items is a mapping
            or a nested sequence
    """
    if value is None:
        return []

    if isinstance(value, (list, tuple)):
        items = list(value)
    elif isinstance(value, (dict, set)):
        raise UnexpectedShapeError(
            f'{field} must be a string or a list of strings',
            details={'field': field, 'received': type(value).__name__}
        )
    else:
        items = [value]

    normalized = []
    for item in items:
        if item is None:
            continue
        if isinstance(item, (dict, list, tuple, set)):
            raise UnexpectedShapeError(
                f'{field} must contain only strings',
                details={'field': field, 'received': type(item).__name__}
            )
        text = str(item).strip()
        if text:
            normalized.append(text)

    return normalized


def coerce_float(value, field, positive=False, minimum=None, maximum=None):
    """
    Convert a submitted number (or numeric string) to float.

    Returns None for None/blank input; callers decide whether that is allowed.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a number', details={'field': field})

    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a number', details={'field': field})

    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f'{field} must be a finite number', details={'field': field})
    if positive and number <= 0:
        raise ValidationError(f'{field} must be greater than 0', details={'field': field})
    if minimum is not None and number < minimum:
        raise ValidationError(
            f'{field} must be at least {minimum}', details={'field': field}
        )
    if maximum is not None and number > maximum:
        raise ValidationError(
            f'{field} must be at most {maximum}', details={'field': field}
        )
    return number


def parse_date(value, field='date'):
    """Parse an ISO date (YYYY-MM-DD, or a full ISO timestamp) into a date."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValidationError(
            f'{field} must be an ISO date (YYYY-MM-DD)', details={'field': field}
        )


def clean_text(value):
    """Strip strings; blank strings become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_area_size(value):
    """
    Split an area size into its numeric magnitude and unit.

    Accepts free text ("5.5 acres"), a bare number, or a structured
    {"value": ..., "unit": ...} mapping. The magnitude is the first numeric
    token of the text, decimals supported.

    Returns:
        tuple: (value: float or None, unit: str)
    """
    if value is None:
        return None, ''

    if isinstance(value, dict):
        magnitude = coerce_float(value.get('value'), 'areaSize.value', minimum=0)
        unit = clean_text(value.get('unit')) or ''
        return magnitude, unit

    if isinstance(value, bool):
        raise ValidationError('areaSize must be text or a number', details={'field': 'areaSize'})

    if isinstance(value, (int, float)):
        return coerce_float(value, 'areaSize', minimum=0), ''

    if isinstance(value, (list, tuple, set)):
        raise UnexpectedShapeError(
            'areaSize must be text or an object with value and unit',
            details={'field': 'areaSize', 'received': type(value).__name__}
        )

    text = str(value).strip()
    match = NUMBER_PATTERN.search(text)
    if not match:
        return None, text

    unit = (text[:match.start()] + ' ' + text[match.end():]).strip(' :,-')
    unit = ' '.join(unit.split())
    return float(match.group(1)), unit


def format_area_size(magnitude, unit):
    """Render a structured area size back to display text."""
    if magnitude is None:
        return unit or None
    return f'{magnitude:g} {unit}'.strip()
