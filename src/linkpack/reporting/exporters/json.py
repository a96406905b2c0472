"""Structured (JSON) export of plan rows and JSON encoding helpers."""

import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional

from linkpack.reporting.rows import ExportRow, normalize_export_fields, project_row


class ExportJSONEncoder(json.JSONEncoder):
    """JSON encoder for export payloads.

    Handles serialization of datetime, Enum, and Path objects.
    """

    def default(self, o):
        if isinstance(o, datetime):
            return o.isoformat()

        if isinstance(o, Enum):
            return o.value

        if isinstance(o, Path):
            return str(o)

        return super().default(o)


def dump_json(data: Any) -> str:
    """Pretty-print data with two-space indent and a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False, cls=ExportJSONEncoder) + "\n"


def build_structured_export(
    rows: Iterable[ExportRow],
    fields: Optional[list[str]] = None,
) -> str:
    """Render rows as a JSON array.

    Args:
        rows: Export rows in plan order
        fields: Field schema; full rows are emitted when None or empty

    Returns:
        JSON document
    """
    rows = list(rows)
    if not fields:
        return dump_json(rows)

    schema = normalize_export_fields(fields)
    return dump_json([project_row(row or {}, schema) for row in rows])
