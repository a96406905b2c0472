"""Constants used throughout linkpack.

This module contains enums, fixed catalogue tables, and default values
to ensure consistency across the application. Tables are immutable
(tuples / frozensets) and are passed into the pure functions that use them.
"""

from enum import Enum


class OutputType(str, Enum):
    """Shortcut file format produced for each URL."""
    HTML = "html"
    URL = "url"
    WEBLOC = "webloc"

    @property
    def extension(self) -> str:
        return self.value


class PrivacyMode(str, Enum):
    """Policy for stripping query/fragment data before downstream use."""
    FULL = "full"
    STRIP_TRACKING = "stripTracking"
    STRIP_ALL = "stripAll"


class DedupeMode(str, Enum):
    """Strictness tier of the dedupe key."""
    EXACT = "exact"
    LOOSE = "loose"
    AGGRESSIVE = "aggressive"


class QRFormat(str, Enum):
    """Image formats the QR render capability can produce."""
    SVG = "svg"
    PNG = "png"


class DetectionKind(str, Enum):
    """What an import detector recognized."""
    URLS = "urls"
    SESSION = "session"


# ============================================================================
# URL canonicalization tables
# ============================================================================

ALLOWED_SCHEMES = frozenset({"http", "https"})

DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
}

# Exact (lowercased) query keys removed by the stripTracking privacy mode,
# in addition to every key starting with TRACKING_PREFIX.
TRACKING_PREFIX = "utm_"
TRACKING_PARAMS = frozenset({
    "fbclid",
    "gclid",
    "dclid",
    "msclkid",
    "igshid",
    "mc_cid",
    "mc_eid",
})


# ============================================================================
# Filename tables
# ============================================================================

# Hosts too generic to name a file on their own; the first path segment is appended.
GENERIC_HOSTS = frozenset({"google", "github", "microsoft"})

# Windows device names, matched case-insensitively against the name minus extension.
RESERVED_DEVICE_NAMES = frozenset(
    {"con", "prn", "aux", "nul"}
    | {f"com{i}" for i in range(1, 10)}
    | {f"lpt{i}" for i in range(1, 10)}
)

FILENAME_MAX_LENGTH = 160
FILENAME_FALLBACK = "link"


# ============================================================================
# Export field schema
# ============================================================================

# Catalogue order is the default "available" order.
EXPORT_FIELDS = (
    "raw",
    "effectiveUrl",
    "normalizedUrl",
    "filename",
    "type",
    "host",
    "path",
    "query",
    "dedupeKey",
    "source",
)

EXPORT_FIELD_LABELS = {
    "raw": "raw",
    "effectiveUrl": "effective_url",
    "normalizedUrl": "normalized_url",
    "filename": "filename",
    "type": "type",
    "host": "host",
    "path": "path",
    "query": "query",
    "dedupeKey": "dedupe_key",
    "source": "source",
}

EXPORT_FIELD_DESCRIPTIONS = {
    "raw": "Exactly what was pasted or imported, unchanged.",
    "effectiveUrl": "The URL actually used after applying the privacy mode.",
    "normalizedUrl": "The canonical URL before the privacy mode was applied.",
    "filename": "The filename generated for this link.",
    "type": "The shortcut file format (html, url or webloc).",
    "host": "The host of the effective URL, including a non-default port.",
    "path": "The path of the effective URL, excluding the query.",
    "query": "The query string of the effective URL (everything after ?).",
    "dedupeKey": "The value used to decide whether two URLs are duplicates.",
    "source": "Where the URL came from (manual, import, session).",
}

# Fallback when a requested schema is empty or contains no known keys.
DEFAULT_EXPORT_FIELDS = ("raw", "effectiveUrl", "filename", "type")

# Columns used by the CSV export when no schema is given at all.
DEFAULT_CSV_FIELDS = ("raw", "effectiveUrl", "normalizedUrl", "filename", "type")


# ============================================================================
# Archive layout
# ============================================================================

ARCHIVE_EXTENSION = "zip"
ARCHIVE_DEFAULT_BASE_NAME = "links"
ARCHIVE_CSV_NAME = "export.csv"
ARCHIVE_JSON_NAME = "export.json"
ARCHIVE_MANIFEST_NAME = "manifest.json"
ARCHIVE_QR_FOLDER = "qr/"
MANIFEST_VERSION = 1


# ============================================================================
# Session (batch) file contract
# ============================================================================

SESSION_KIND = "linkpack-batch"
SESSION_VERSION = 1

# Kind tags accepted when reading; files are always written with SESSION_KIND.
SESSION_READ_KINDS = (SESSION_KIND, "link-file-generator-batch")


# ============================================================================
# Media types
# ============================================================================

MEDIA_TYPES = {
    OutputType.HTML: "text/html;charset=utf-8",
    OutputType.URL: "text/plain;charset=utf-8",
    OutputType.WEBLOC: "application/xml;charset=utf-8",
}


# ============================================================================
# Detector tuning
# ============================================================================

CSV_DELIMITERS = (",", "\t", ";")
CSV_SNIFF_CHARS = 8000
CSV_SCORE_ROWS = 12
CSV_HEADER_KEYS = ("url", "link", "href", "website", "homepage")

RECORD_URL_KEYS = (
    "url",
    "uri",
    "href",
    "link",
    "website",
    "web",
    "target",
    "address",
)

# "data" stays last because it is the most generic.
RECORD_LIST_KEYS = (
    "urls",
    "links",
    "bookmarks",
    "items",
    "entries",
    "records",
    "results",
    "data",
)

# Extensions users commonly type into a download name.
KNOWN_NAME_EXTENSIONS = ("zip", "csv", "json", "html", "url", "webloc")


# ============================================================================
# Application-wide defaults
# ============================================================================

DEFAULTS = {
    "dedupe": True,
    "dedupe_mode": DedupeMode.EXACT,
    "export_csv": True,
    "export_json": True,
    "qr_png": False,
    "qr_svg": False,
    "privacy_mode": PrivacyMode.FULL,
    "output_type": OutputType.HTML,
    "archive_name": ARCHIVE_DEFAULT_BASE_NAME,
    "source": "manual",
    "qr_scale": 8,
    "qr_margin": 4,
    "qr_ecc": "M",
    "qr_foreground": "#000000",
    "qr_background": "#ffffff",
}


class ExportFormat(str, Enum):
    """Tabular export formats."""
    CSV = "csv"
    JSON = "json"
