"""
Chart-ready series for the Drilling Monitoring view.

Splits a well's canonical records into the three depth-indexed charts:
stacked rock composition bars, DT (delta-T) line and GR (gamma ray) line.
Fields missing from a record come out as None so the chart simply leaves a gap.
"""

from typing import Any, Dict, List, Optional

from drill_ai.parser import DEPTH_ALIASES, Record, depth_candidate, to_number


# Lithology percentage columns, in stacking order
ROCK_FIELDS = ["SH", "SS", "LS", "DOL", "ANH", "Coal", "Salt"]

ROCK_LABELS = {
    "SH": "Shale",
    "SS": "Sandstone",
    "LS": "Limestone",
    "DOL": "Dolomite",
    "ANH": "Anhydrite",
    "Coal": "Coal",
    "Salt": "Salt",
}

ROCK_COLORS = {
    "SH": "#f472b6",
    "SS": "#fb923c",
    "LS": "#fde047",
    "DOL": "#86efac",
    "ANH": "#93c5fd",
    "Coal": "#6b7280",
    "Salt": "#d1d5db",
}


def field_value(record: Record, field: str) -> Optional[float]:
    """
    Read a chart field from a record.

    The header name is used as-is first; the lowercase variant (e.g. 'dt') is
    accepted as an alternative.
    """
    for key in (field, field.lower()):
        if key in record:
            return to_number(record[key])
    return None


def build_chart_series(records: Optional[List[Record]]) -> Dict[str, Any]:
    """
    Build the series consumed by the charts.

    Args:
        records: Canonical records of one well (None or empty means no data)

    Returns:
        Dictionary with:
        - empty: True when there is nothing to plot
        - depth: x-axis values (first depth alias present in each record)
        - rock_composition: {field: [values]} for ROCK_FIELDS
        - rock_fields, rock_labels, rock_colors: stacking order, legend names
          and bar colours for the rock composition chart
        - dt, gr: log values
        - point_count: number of records
    """
    records = records or []

    series: Dict[str, Any] = {
        "empty": len(records) == 0,
        "point_count": len(records),
        "depth": [],
        "rock_composition": {field: [] for field in ROCK_FIELDS},
        "rock_fields": list(ROCK_FIELDS),
        "rock_labels": dict(ROCK_LABELS),
        "rock_colors": dict(ROCK_COLORS),
        "dt": [],
        "gr": [],
    }

    for record in records:
        series["depth"].append(to_number(depth_candidate(record, DEPTH_ALIASES)))
        for field in ROCK_FIELDS:
            series["rock_composition"][field].append(field_value(record, field))
        series["dt"].append(field_value(record, "DT"))
        series["gr"].append(field_value(record, "GR"))

    return series
