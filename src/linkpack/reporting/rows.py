"""Export rows and the export field schema.

An export row is a flat dict holding every field of the catalogue for one
deduplicated item. Exporters project rows through an ordered field
schema; the schema is always a non-empty, duplicate-free subset of the
catalogue.
"""

from typing import Any, Iterable, Optional

from linkpack.core.constants import DEFAULT_EXPORT_FIELDS, DEFAULTS, OutputType
from linkpack.core.models import BatchItem, Plan, is_known_export_field
from linkpack.urls.filenames import link_filename
from linkpack.urls.normalizer import parse_url


ExportRow = dict[str, Any]

# Fields that always project to a string, even when a row lacks them.
_CORE_FIELDS = ("raw", "effectiveUrl", "normalizedUrl", "filename", "type")


def normalize_export_fields(fields: Optional[Iterable[Any]]) -> list[str]:
    """Keep known field keys in the given order, dropping duplicates.

    Returns:
        The cleaned schema, or the default schema when nothing known remains
    """
    cleaned: list[str] = []
    for key in fields or []:
        if isinstance(key, str) and is_known_export_field(key) and key not in cleaned:
            cleaned.append(key)
    return cleaned or list(DEFAULT_EXPORT_FIELDS)


def project_row(row: ExportRow, fields: list[str]) -> ExportRow:
    """Shape a row to the requested fields without inventing values.

    Core fields default to "". Other fields are copied only when the row has them.
    """
    out: ExportRow = {}
    for key in fields:
        if key in _CORE_FIELDS:
            value = row.get(key)
            out[key] = "" if value is None else value
        elif key in row:
            out[key] = row[key]
    return out


def _url_parts(url: str) -> tuple[str, str, str]:
    parsed = parse_url(url)
    if parsed is None:
        return "", "", ""
    host = f"[{parsed.host}]" if ":" in parsed.host else parsed.host
    if parsed.port is not None:
        host = f"{host}:{parsed.port}"
    return host, parsed.path, parsed.query


def build_export_row(item: BatchItem, output_type: OutputType, filename: str) -> ExportRow:
    host, path, query = _url_parts(item.effective_url)
    return {
        "raw": item.raw,
        "effectiveUrl": item.effective_url,
        "normalizedUrl": item.normalized_url or item.effective_url,
        "filename": filename,
        "type": output_type.value,
        "host": host,
        "path": path,
        "query": query,
        "dedupeKey": item.dedupe_key,
        "source": item.source or DEFAULTS["source"],
    }


def build_export_rows(
    items: Iterable[BatchItem],
    output_type: OutputType = DEFAULTS["output_type"],
) -> list[ExportRow]:
    """Build one export row per item, in item order.

    Filenames are uniquified against a name set local to this call.
    """
    used_names: set[str] = set()
    return [
        build_export_row(item, output_type, link_filename(item.effective_url, output_type, used_names))
        for item in items
    ]


def plan_export_rows(plan: Plan) -> list[ExportRow]:
    """Export rows for the deduplicated items of a plan."""
    return build_export_rows(plan.deduped, plan.output_type)
