"""Import routing: pick a detector for a payload and turn its output into batch lines.

Detectors are kept in one ordered table. Routing tries the declared
extension / media type first, then content signatures, and the first
detector that produces a result wins.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from linkpack.core.constants import DetectionKind
from linkpack.core.exceptions import InputEmptyError, UnrecognizedFormatError
from linkpack.core.models import SessionState
from linkpack.detectors.base import Detection, Detector, Payload, looks_url_like, url_detection
from linkpack.detectors.delimited import detect_delimited, sniff_delimiter
from linkpack.detectors.markup import detect_markup, looks_like_bookmark_export, looks_like_html
from linkpack.detectors.shortcut import (
    detect_internet_shortcut,
    detect_plist,
    looks_like_internet_shortcut,
    looks_like_plist,
)
from linkpack.detectors.structured import detect_structured
from linkpack.orchestrator.planner import split_lines
from linkpack.storage.session import restore_session
from linkpack.urls.normalizer import normalize_url


logger = logging.getLogger(__name__)

TEXT_LABEL = "text file"
UNSUPPORTED_MESSAGE = "Unsupported file type. Try .json, .csv, .txt, .url, .webloc, or .html."


# ============================================================================
# Plain line lists
# ============================================================================

def detect_lines(payload: Payload) -> Optional[Detection]:
    lines = split_lines(payload.clean_text)
    if not lines:
        return None
    return url_detection(TEXT_LABEL, lines)


def _has_url_line(text: str) -> bool:
    return any(looks_url_like(line) for line in split_lines(text))


def _looks_delimited(text: str) -> bool:
    first_line = text.strip().split("\n", 1)[0]
    return sniff_delimiter(first_line) in first_line


def _looks_structured(text: str) -> bool:
    return text.lstrip()[:1] in ("{", "[")


# ============================================================================
# Detector Table
# ============================================================================

@dataclass(frozen=True)
class DetectorEntry:
    """One entry of the routing table."""
    name: str
    label: str
    declared: Callable[[Payload], bool]
    signature: Callable[[str], bool]
    detect: Detector


DETECTORS: tuple[DetectorEntry, ...] = (
    DetectorEntry(
        name="internet_shortcut",
        label=".url shortcut",
        declared=lambda p: p.declares("url") or p.media_has("internet-shortcut"),
        signature=looks_like_internet_shortcut,
        detect=detect_internet_shortcut,
    ),
    DetectorEntry(
        name="plist",
        label=".webloc file",
        declared=lambda p: p.declares("webloc") or p.media_has("plist"),
        signature=looks_like_plist,
        detect=detect_plist,
    ),
    DetectorEntry(
        name="markup",
        label="HTML file",
        declared=lambda p: p.declares("html", "htm") or p.media_has("html"),
        signature=lambda t: looks_like_html(t) or looks_like_bookmark_export(t),
        detect=detect_markup,
    ),
    DetectorEntry(
        name="structured",
        label="JSON file",
        declared=lambda p: p.declares("json") or p.media_has("json"),
        signature=_looks_structured,
        detect=detect_structured,
    ),
    DetectorEntry(
        name="delimited",
        label="CSV file",
        declared=lambda p: p.declares("csv", "tsv") or p.media_has("csv")
        or p.media_has("tab-separated"),
        signature=_looks_delimited,
        detect=detect_delimited,
    ),
    DetectorEntry(
        name="lines",
        label=TEXT_LABEL,
        declared=lambda p: p.declares("txt") or (p.media_type or "").lower().startswith("text/plain"),
        signature=_has_url_line,
        detect=detect_lines,
    ),
)


def route_payload(
    payload: Payload,
    detectors: tuple[DetectorEntry, ...] = DETECTORS,
) -> Optional[Detection]:
    """Run the routing table over a payload.

    A declared match is authoritative: its detector's result is returned
    even when empty. Otherwise content signatures are tried in table order
    and the first non-empty detection wins.

    Returns:
        Detection, or None when no detector recognizes the payload
    """
    for entry in detectors:
        if entry.declared(payload):
            logger.debug(f"Routing {payload.name or '<text>'} to {entry.name} by declaration")
            detection = entry.detect(payload)
            if detection is None:
                logger.warning(f"{payload.name or entry.label}: declared as {entry.label} but nothing was extracted")
                return Detection(kind=DetectionKind.URLS, source=entry.label)
            return detection

    text = payload.clean_text
    for entry in detectors:
        if not entry.signature(text):
            continue
        detection = entry.detect(payload)
        if detection is not None:
            logger.debug(f"Routing {payload.name or '<text>'} to {entry.name} by signature")
            return detection

    return None


# ============================================================================
# Import
# ============================================================================

def normalize_and_dedupe_urls(urls: list[str]) -> list[str]:
    """Canonicalize imported URLs (no privacy mode) and drop invalid and exact duplicates."""
    seen: set[str] = set()
    unique: list[str] = []
    for raw in urls:
        result = normalize_url(raw)
        if not result.ok or result.url in seen:
            continue
        seen.add(result.url)
        unique.append(result.url)
    return unique


def merge_lines(existing_text: str, lines: list[str], replace: bool = True) -> str:
    """Replace the batch text with lines, or append them after the existing text."""
    text = "\n".join(s.strip() for s in lines if s and s.strip())
    existing = existing_text or ""
    if replace or not existing.strip():
        return text
    return existing.rstrip() + "\n" + text


@dataclass
class ImportOutcome:
    """What one import produced: URLs, plus a restorable session when present."""
    source: str
    urls: list[str] = field(default_factory=list)
    session: Optional[SessionState] = None

    def batch_text(self, existing_text: str = "", replace: bool = True) -> str:
        """New batch text after applying this import with replace/append semantics.

        A session in replace mode restores its lines verbatim; in append
        mode only its valid URLs are contributed.

        Raises:
            InputEmptyError: If appending a session without valid URLs
        """
        if self.session is not None and replace:
            return self.session.text
        if not self.urls:
            raise InputEmptyError(f"{self.source}: no valid URLs found.")
        return merge_lines(existing_text, self.urls, replace)


def import_payload(payload: Payload) -> ImportOutcome:
    """Detect, extract and canonicalize the URLs of an import payload.

    Raises:
        UnrecognizedFormatError: If no detector recognizes the payload
        SessionFormatError: If a session file is malformed
        InputEmptyError: If the payload yields no valid URL
    """
    detection = route_payload(payload)
    if detection is None:
        raise UnrecognizedFormatError(UNSUPPORTED_MESSAGE)

    if detection.kind is DetectionKind.SESSION and detection.session is not None:
        state = restore_session(detection.session)
        urls = normalize_and_dedupe_urls(state.lines)
        logger.info(f"Imported {detection.source} with {len(state.lines)} line(s)")
        return ImportOutcome(source=detection.source, urls=urls, session=state)

    urls = normalize_and_dedupe_urls(detection.urls)
    if not urls:
        raise InputEmptyError(f"{detection.source}: no valid URLs found.")

    logger.info(f"Imported {len(urls)} URL(s) from {detection.source}")
    return ImportOutcome(source=detection.source, urls=urls)
