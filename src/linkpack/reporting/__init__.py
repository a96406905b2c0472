"""Tabular export of plans: export rows, field schema, CSV and JSON exporters."""

from linkpack.reporting.exporters import build_delimited_export, build_structured_export
from linkpack.reporting.rows import (
    build_export_rows,
    normalize_export_fields,
    plan_export_rows,
)


__all__ = [
    "build_delimited_export",
    "build_structured_export",
    "build_export_rows",
    "normalize_export_fields",
    "plan_export_rows",
]
