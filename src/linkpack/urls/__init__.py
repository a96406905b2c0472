"""URL canonicalization, deduplication and filename synthesis.

This package provides the per-URL building blocks of the batch pipeline:
- normalize_url / apply_privacy_mode: canonicalize one URL and strip query data
- dedupe_key / URLDeduper: decide URL equivalence at three strictness tiers
- filename helpers: derive safe, unique shortcut filenames
"""

from linkpack.urls.deduper import URLDeduper, dedupe_key
from linkpack.urls.filenames import (
    ensure_extension,
    ensure_safe_filename,
    link_filename,
    make_unique_filename,
    safe_base_name_from_url,
    sanitize_filename,
    single_download_name,
)
from linkpack.urls.normalizer import apply_privacy_mode, is_valid_host, normalize_url

__all__ = [
    "URLDeduper",
    "dedupe_key",
    "ensure_extension",
    "ensure_safe_filename",
    "link_filename",
    "make_unique_filename",
    "safe_base_name_from_url",
    "sanitize_filename",
    "single_download_name",
    "apply_privacy_mode",
    "is_valid_host",
    "normalize_url",
]
