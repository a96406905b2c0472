"""Delimited (CSV) export of plan rows.

Quoting is applied only where needed: a value containing a double quote,
comma or line break is wrapped in quotes with inner quotes doubled.
Lines end with "\\n" and the document ends with a newline.
"""

import re
from typing import Any, Iterable, Optional

from linkpack.core.constants import DEFAULT_CSV_FIELDS, EXPORT_FIELD_LABELS
from linkpack.reporting.rows import ExportRow, normalize_export_fields, project_row


_NEEDS_QUOTES = re.compile(r'[",\n\r]')


def csv_escape(value: Any) -> str:
    s = "" if value is None else str(value)
    if _NEEDS_QUOTES.search(s):
        return '"' + s.replace('"', '""') + '"'
    return s


def header_for_field(key: str) -> str:
    return EXPORT_FIELD_LABELS.get(key, key)


def build_delimited_export(
    rows: Iterable[ExportRow],
    fields: Optional[list[str]] = None,
) -> str:
    """Render rows as CSV text.

    Args:
        rows: Export rows in plan order
        fields: Field schema; the five-column default when None or empty

    Returns:
        CSV document with a header line
    """
    schema = normalize_export_fields(fields) if fields else list(DEFAULT_CSV_FIELDS)

    lines = [",".join(header_for_field(key) for key in schema)]
    for row in rows:
        picked = project_row(row or {}, schema)
        lines.append(",".join(csv_escape(picked.get(key, "")) for key in schema))

    return "\n".join(lines) + "\n"
