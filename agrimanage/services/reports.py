# =============================================================================
# AgriManage Backend
# services/reports.py - Tabular Report Export
#
# Turns serialized records into report rows using a column-name mapping and
# renders them as CSV for download.
# =============================================================================

import io

import pandas as pd

from agrimanage.errors import UnexpectedShapeError


def _cell(value):
    if isinstance(value, (list, tuple)):
        return ', '.join(str(item) for item in value)
    return value


def build_report(records, columns):
    """
    Map records to report rows.

    Args:
        records: List of dicts (e.g. Plant.to_dict() results)
        columns: Mapping of record key -> column header, in column order

    Returns:
        list: One dict per record keyed by column header

    Raises:
        UnexpectedShapeError: records is not a list of mappings
    """
    if not isinstance(records, (list, tuple)):
        raise UnexpectedShapeError(
            'Report records must be a list',
            details={'received': type(records).__name__}
        )

    rows = []
    for record in records:
        if not isinstance(record, dict):
            raise UnexpectedShapeError(
                'Report records must be objects',
                details={'received': type(record).__name__}
            )
        rows.append({
            header: _cell(record.get(key))
            for key, header in columns.items()
        })
    return rows


def render_csv(rows, columns):
    """Render report rows as CSV text with a header line."""
    frame = pd.DataFrame(rows, columns=list(columns.values()))
    buffer = io.StringIO()
    frame.to_csv(buffer, index=False)
    return buffer.getvalue()
