"""
SmartBiz - Data Loader
Parses uploaded Metric/Value spreadsheets and merges them into the
current metrics.
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Tuple

import pandas as pd

from business_parameters import KEY_COLUMNS, METRIC_LABELS, VALUE_COLUMN
from smartbiz.core.metrics import BusinessMetrics, custom_value


class MetricsFileError(Exception):
    """Raised when an uploaded metrics file cannot be parsed."""


@dataclass(frozen=True)
class ImportResult:
    metrics: BusinessMetrics
    updated_count: int

    @property
    def message(self) -> str:
        if self.updated_count > 0:
            return f"Success! Imported {self.updated_count} data points."
        return 'Warning: No readable data found. Check column headers "Metric" and "Value".'


def parse_numeric(value) -> float:
    """Parse formatted number strings."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = str(value).replace('$', '').replace(',', '').replace('%', '').replace(' ', '').strip()
    if cleaned.startswith('(') and cleaned.endswith(')'):
        cleaned = '-' + cleaned[1:-1]
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def coerce_number(value: Any) -> float:
    """Form-entry coercion: anything that does not parse becomes 0.0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if pd.isna(number):
        return 0.0
    return number


def _file_name(file) -> str:
    name = getattr(file, 'name', None)
    if name is None and isinstance(file, (str, Path)):
        name = str(file)
    return str(name or '')


def read_metrics_table(file) -> pd.DataFrame:
    """Read the first sheet (or the CSV) of an upload into a DataFrame."""
    suffix = Path(_file_name(file)).suffix.lower()
    try:
        if suffix == '.csv':
            return pd.read_csv(file)
        return pd.read_excel(file, sheet_name=0)
    except Exception as e:
        print(f"[ERROR] Could not read metrics file {_file_name(file) or '<upload>'}: {e}", file=sys.stderr)
        raise MetricsFileError("Error parsing file. Ensure it is a valid Excel/CSV.") from e


def extract_metric_rows(df: pd.DataFrame) -> List[Tuple[str, Any]]:
    """
    Pull (label, value) pairs out of the table.

    The label comes from the first non-empty of the accepted key columns,
    the value from the ``Value`` column. Rows missing either are skipped.
    """
    columns = {str(col).strip(): col for col in df.columns}
    key_columns = [columns[name] for name in KEY_COLUMNS if name in columns]
    value_column = columns.get(VALUE_COLUMN)
    if value_column is None or not key_columns:
        return []

    rows = []
    for _, row in df.iterrows():
        key_name = None
        for col in key_columns:
            candidate = row[col]
            if pd.notna(candidate) and str(candidate).strip():
                key_name = str(candidate).strip()
                break
        val = row[value_column]
        if key_name is None or pd.isna(val):
            continue
        rows.append((key_name, val))
    return rows


def merge_metric_rows(metrics: BusinessMetrics, rows: List[Tuple[str, Any]]) -> ImportResult:
    """
    Overlay imported rows on ``metrics``.

    Known labels overwrite their field (unparseable values become 0.0);
    anything else lands in custom metrics, numeric when it parses.
    """
    core_updates = {}
    custom = dict(metrics.custom_metrics)
    updated_count = 0

    for label, val in rows:
        field_name = METRIC_LABELS.get(label)
        if field_name:
            core_updates[field_name] = parse_numeric(val)
        else:
            custom[label] = custom_value(val)
        updated_count += 1

    if updated_count == 0:
        return ImportResult(metrics=metrics, updated_count=0)

    return ImportResult(
        metrics=metrics.replace(custom_metrics=custom, **core_updates),
        updated_count=updated_count,
    )


def load_metrics_file(file, metrics: BusinessMetrics) -> ImportResult:
    """Parse an uploaded xlsx/xls/csv and merge it into ``metrics``."""
    df = read_metrics_table(file)
    rows = extract_metric_rows(df)
    result = merge_metric_rows(metrics, rows)
    if result.updated_count:
        print(f"  [OK] Imported {result.updated_count} data points from {_file_name(file) or 'upload'}")
    else:
        print(f"  [WARN] No Metric/Value rows found in {_file_name(file) or 'upload'}")
    return result
