"""Archive assembler.

Builds one zip archive from batch items:
- one shortcut file per item, named by the filename synthesizer
- optional QR images per item under qr/ (SVG before PNG)
- manifest.json describing what was produced
- optional export.csv / export.json whose filename column matches the archive

Assembly is all-or-nothing: any failure raises and no bytes are returned.
Every entry carries the same timestamp so a fixed created_at yields
byte-identical archives.
"""

import asyncio
import io
import logging
import zipfile
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Optional, Sequence

from linkpack.core.constants import (
    ARCHIVE_CSV_NAME,
    ARCHIVE_DEFAULT_BASE_NAME,
    ARCHIVE_EXTENSION,
    ARCHIVE_JSON_NAME,
    ARCHIVE_MANIFEST_NAME,
    ARCHIVE_QR_FOLDER,
    MANIFEST_VERSION,
    OutputType,
    QRFormat,
)
from linkpack.core.exceptions import ArchiveError, DependencyUnavailableError, InputEmptyError
from linkpack.core.models import (
    ArchiveManifest,
    ArchiveResult,
    BatchItem,
    BatchOptions,
    Plan,
    QRRenderOptions,
)
from linkpack.qr.base import QRRenderer
from linkpack.renderers.shortcuts import render_file, to_safe_http_url
from linkpack.reporting.exporters.csv import build_delimited_export
from linkpack.reporting.exporters.json import build_structured_export, dump_json
from linkpack.reporting.rows import build_export_rows
from linkpack.urls.filenames import (
    ensure_safe_filename,
    link_filename,
    make_unique_base,
    simple_base_name,
)


logger = logging.getLogger(__name__)

# Zip timestamps cannot predate 1980.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def archive_filename(base_name: Optional[str]) -> str:
    """User base name (default "links") made safe, with ".zip" appended if absent."""
    base = (base_name or "").strip() or ARCHIVE_DEFAULT_BASE_NAME
    return ensure_safe_filename(base, ARCHIVE_EXTENSION, fallback=ARCHIVE_DEFAULT_BASE_NAME)


def qr_base_name(link_name: str, index: int, used_bases: set[str]) -> str:
    """Unique QR image base name derived from a link filename."""
    stem = PurePosixPath(link_name).stem
    cleaned = simple_base_name(stem).rstrip(". ")
    return make_unique_base(cleaned or f"link_{index + 1}", used_bases)


def _requested_formats(options: BatchOptions) -> list[QRFormat]:
    formats = []
    if options.qr_svg:
        formats.append(QRFormat.SVG)
    if options.qr_png:
        formats.append(QRFormat.PNG)
    return formats


async def _render_item_images(
    renderer: QRRenderer,
    url: str,
    base: str,
    formats: list[QRFormat],
    render_options: QRRenderOptions,
) -> list[tuple[str, bytes]]:
    images = []
    for fmt in formats:
        data = await renderer.render(url, fmt, render_options)
        if data:
            images.append((f"{ARCHIVE_QR_FOLDER}{base}.{fmt.value}", data))
    return images


async def build_qr_entries(
    link_entries: Sequence[tuple[str, BatchItem]],
    options: BatchOptions,
    renderer: Optional[QRRenderer],
) -> list[tuple[str, bytes]]:
    """Render the QR images of an archive.

    Items are rendered concurrently; entry order follows item order.

    Raises:
        DependencyUnavailableError: If the renderer is missing or unavailable,
            a render fails, or nothing was produced
    """
    if renderer is None or not renderer.available:
        raise DependencyUnavailableError(
            "QR requested, but no QR renderer is available. "
            "Install it with: pip install qrcode[pil]"
        )

    formats = _requested_formats(options)
    used_bases: set[str] = set()
    jobs = []

    for index, (link_name, item) in enumerate(link_entries):
        base = qr_base_name(link_name, index, used_bases)
        safe_url = to_safe_http_url(item.effective_url)
        if not safe_url:
            logger.warning(f"Skipping QR for unsafe URL: {item.effective_url!r}")
            continue
        jobs.append(_render_item_images(renderer, safe_url, base, formats, options.qr_render))

    results = await asyncio.gather(*jobs)
    entries = [entry for images in results for entry in images]

    if not entries:
        sample = link_entries[0][1].effective_url if link_entries else ""
        raise DependencyUnavailableError(
            f"QR requested, but no QR files were generated. Sample URL: {sample}"
        )

    return entries


def _zip_date_time(created_at: datetime) -> tuple[int, int, int, int, int, int]:
    stamp = tuple(created_at.timetuple()[:6])
    return max(stamp, _ZIP_EPOCH)


def write_zip(entries: Sequence[tuple[str, bytes | str]], created_at: datetime) -> bytes:
    """Write entries, in order, into an in-memory deflated zip.

    Raises:
        ArchiveError: If the archive cannot be written
    """
    date_time = _zip_date_time(created_at)
    buffer = io.BytesIO()

    try:
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, content in entries:
                info = zipfile.ZipInfo(name, date_time=date_time)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = 0o644 << 16
                data = content.encode("utf-8") if isinstance(content, str) else content
                zf.writestr(info, data)
    except (OSError, ValueError, zipfile.LargeZipFile) as e:
        raise ArchiveError(f"Failed to write archive: {e}") from e

    return buffer.getvalue()


async def build_archive(
    items: Sequence[BatchItem],
    output_type: OutputType,
    base_name: Optional[str] = ARCHIVE_DEFAULT_BASE_NAME,
    options: Optional[BatchOptions] = None,
    qr_renderer: Optional[QRRenderer] = None,
    created_at: Optional[datetime] = None,
) -> ArchiveResult:
    """Assemble the archive for a set of batch items.

    Args:
        items: Deduplicated items in plan order
        output_type: Shortcut format of the link files
        base_name: Archive base name (".zip" is appended when missing)
        options: Export and QR options
        qr_renderer: QR capability; required only when QR images are requested
        created_at: Timestamp for the manifest and every entry (defaults to now, UTC)

    Returns:
        ArchiveResult with the archive bytes, filename and export rows

    Raises:
        InputEmptyError: If there are no items
        DependencyUnavailableError: If QR images are requested but cannot be produced
        ArchiveError: If the archive cannot be written
    """
    options = options or BatchOptions()
    output_type = OutputType(output_type)
    created_at = created_at or datetime.now(timezone.utc)

    if not items:
        raise InputEmptyError("No valid URLs to archive.")

    # Link files
    used_link_names: set[str] = set()
    link_entries: list[tuple[str, BatchItem]] = []
    entries: list[tuple[str, bytes | str]] = []

    for item in items:
        rendered = render_file(item.effective_url, output_type)
        name = link_filename(item.effective_url, output_type, used_link_names)
        link_entries.append((name, item))
        entries.append((name, rendered.contents))

    # Export rows carry the exact archive filenames
    export_rows = build_export_rows(items, output_type)
    for row, (name, _) in zip(export_rows, link_entries):
        row["filename"] = name

    if options.wants_qr:
        entries.extend(await build_qr_entries(link_entries, options, qr_renderer))

    manifest = ArchiveManifest(
        created_at=created_at,
        output_type=output_type,
        link_file_count=len(used_link_names),
        exports={
            "csv": options.export_csv,
            "json": options.export_json,
            "qrPng": options.qr_png,
            "qrSvg": options.qr_svg,
        },
        options=options.to_dict(),
        version=MANIFEST_VERSION,
    )
    entries.append((ARCHIVE_MANIFEST_NAME, dump_json(manifest.to_dict())))

    if options.export_csv:
        entries.append((ARCHIVE_CSV_NAME, build_delimited_export(export_rows, options.export_fields)))
    if options.export_json:
        entries.append((ARCHIVE_JSON_NAME, build_structured_export(export_rows, options.export_fields)))

    data = write_zip(entries, created_at)
    filename = archive_filename(base_name)

    logger.info(f"Built archive {filename}: {len(link_entries)} link file(s), {len(entries)} entries")

    return ArchiveResult(
        data=data,
        filename=filename,
        file_count=len(used_link_names),
        export_rows=export_rows,
        manifest=manifest,
        entries=[name for name, _ in entries],
    )


async def build_plan_archive(
    plan: Plan,
    qr_renderer: Optional[QRRenderer] = None,
    created_at: Optional[datetime] = None,
) -> ArchiveResult:
    """Build the archive for a plan's deduplicated items."""
    return await build_archive(
        plan.deduped,
        plan.output_type,
        plan.archive_base_name,
        plan.options,
        qr_renderer=qr_renderer,
        created_at=created_at,
    )
