"""Import format detectors.

Each detector turns one ingestible shape into a flat, ordered URL list:
- detect_delimited: CSV / TSV / semicolon text
- detect_structured: JSON records, bookmark trees, session files
- detect_markup: HTML redirect pages and bookmark exports
- detect_internet_shortcut / detect_plist: .url and .webloc files
- route_payload / import_payload: ordered routing over all detectors
"""

from linkpack.detectors.base import Detection, Payload, looks_url_like
from linkpack.detectors.delimited import detect_delimited
from linkpack.detectors.markup import detect_markup
from linkpack.detectors.router import (
    DETECTORS,
    ImportOutcome,
    import_payload,
    merge_lines,
    route_payload,
)
from linkpack.detectors.shortcut import detect_internet_shortcut, detect_plist
from linkpack.detectors.structured import detect_structured

__all__ = [
    "Detection",
    "Payload",
    "looks_url_like",
    "detect_delimited",
    "detect_markup",
    "DETECTORS",
    "ImportOutcome",
    "import_payload",
    "merge_lines",
    "route_payload",
    "detect_internet_shortcut",
    "detect_plist",
    "detect_structured",
]
