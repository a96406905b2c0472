"""Batch planner.

Turns newline-delimited batch text into a Plan: every line is canonicalized,
the privacy mode is applied, lines are partitioned into valid and invalid
items, and valid items are deduplicated first-occurrence-wins. Input order
is preserved end to end.
"""

import logging
import re
from typing import Optional

from linkpack.core.constants import (
    ARCHIVE_DEFAULT_BASE_NAME,
    DEFAULTS,
    OutputType,
    PrivacyMode,
)
from linkpack.core.models import BatchItem, BatchOptions, InvalidItem, Plan
from linkpack.urls.deduper import URLDeduper, dedupe_key
from linkpack.urls.normalizer import apply_privacy_mode, normalize_url


logger = logging.getLogger(__name__)

_NEWLINE = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    """Split text on any newline convention into trimmed, non-empty lines."""
    return [line.strip() for line in _NEWLINE.split(text or "") if line.strip()]


def parse_batch_text(text: str) -> list[str]:
    return split_lines(text)


def build_plan(
    text: str,
    options: Optional[BatchOptions] = None,
    privacy_mode: PrivacyMode = DEFAULTS["privacy_mode"],
    output_type: OutputType = DEFAULTS["output_type"],
    archive_base_name: str = ARCHIVE_DEFAULT_BASE_NAME,
    source: str = DEFAULTS["source"],
) -> Plan:
    """Build a plan from batch text.

    Invalid lines are collected with their reason and never abort the batch.

    Args:
        text: Raw batch text, one URL per line
        options: Batch options (defaults when None)
        privacy_mode: Privacy mode applied to each valid URL
        output_type: Shortcut format the plan will be rendered to
        archive_base_name: Base name of the archive built from the plan
        source: Origin label recorded on each item

    Returns:
        Plan with valid, invalid and deduped items in input order
    """
    options = options or BatchOptions()
    lines = parse_batch_text(text)

    valid: list[BatchItem] = []
    invalid: list[InvalidItem] = []

    for line in lines:
        result = normalize_url(line)
        if not result.ok:
            logger.debug(f"Invalid line {line!r}: {result.reason}")
            invalid.append(InvalidItem(raw=line, reason=result.reason))
            continue

        effective = apply_privacy_mode(result.url, privacy_mode)
        valid.append(BatchItem(
            raw=line,
            effective_url=effective,
            normalized_url=result.url,
            dedupe_key=dedupe_key(effective, options.dedupe_mode),
            source=source,
        ))

    if options.dedupe:
        deduper = URLDeduper(options.dedupe_mode)
        deduped, removed = deduper.deduplicate_items(valid, lambda item: item.effective_url)
    else:
        deduped, removed = list(valid), 0

    logger.info(
        f"Planned {len(lines)} line(s): {len(deduped)} unique, "
        f"{len(invalid)} invalid, {removed} duplicate(s) removed"
    )

    return Plan(
        lines=lines,
        valid=valid,
        invalid=invalid,
        deduped=deduped,
        removed_count=removed,
        options=options,
        output_type=output_type,
        archive_base_name=archive_base_name or ARCHIVE_DEFAULT_BASE_NAME,
    )
