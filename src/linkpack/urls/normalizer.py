"""URL canonicalization and privacy modes.

This module validates and normalizes a single URL for offline use. It handles:
- Paste cleanup (wrapping brackets and quotes)
- Scheme defaulting (https:// for bare hosts)
- Scheme and host lowercasing
- Host validation (domain, localhost, IPv4, IPv6)
- Default port removal
- Privacy modes that strip tracking parameters or the whole query

Canonicalization is total: failures come back as NormalizeResult values.
"""

import re
from typing import Optional
from urllib.parse import SplitResult, quote, unquote_plus, urlsplit

from linkpack.core.constants import (
    ALLOWED_SCHEMES,
    DEFAULT_PORTS,
    PrivacyMode,
    TRACKING_PARAMS,
    TRACKING_PREFIX,
)
from linkpack.core.models import NormalizeResult, NormalizedUrl


REASON_EMPTY = "Please enter a URL."
REASON_UNPARSABLE = "That does not look like a valid URL."
REASON_SCHEME = "Only http:// and https:// URLs are supported."
REASON_HOST = "That does not look like a valid web address."

_WRAP_LEADING = re.compile(r"^[<\"'`]+")
_WRAP_TRAILING = re.compile(r"[>\"'`]+$")
_SCHEME_PREFIX = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_IPV4 = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")
_IPV6_CHARS = re.compile(r"^[0-9a-f:.]+$", re.IGNORECASE)
_LABEL = re.compile(r"^[a-z0-9-]+$")
_TLD = re.compile(r"^[a-z]{2,}$")

# Characters left unescaped in each component; '%' keeps existing escapes intact.
# "'" is always escaped so a canonical URL never ends in a wrapping quote.
_PATH_SAFE = "/%:@!$&()*+,;=-._~"
_QUERY_SAFE = "/?%:@!$&()*+,;=-._~"


# ============================================================================
# Host Validation
# ============================================================================

def is_valid_host(hostname: str) -> bool:
    """Check whether a host is usable in an offline shortcut.

    Accepts "localhost", dotted-quad IPv4, IPv6-shaped literals and dotted
    domains whose labels are 1-63 chars of [a-z0-9-] not bounded by hyphens
    and whose final label is at least two letters.

    Args:
        hostname: Host without brackets or port

    Returns:
        True if the host passes validation
    """
    h = (hostname or "").strip().lower()
    if not h:
        return False

    if h == "localhost":
        return True

    # Trailing dot (absolute FQDN) usually comes from sentence punctuation.
    if h.endswith("."):
        return False

    if _IPV4.match(h):
        return all(0 <= int(part) <= 255 for part in h.split("."))

    if ":" in h:
        return bool(_IPV6_CHARS.match(h)) and h.count(":") >= 2

    if "." not in h:
        return False

    labels = h.split(".")
    for label in labels:
        if not label or len(label) > 63:
            return False
        if not _LABEL.match(label):
            return False
        if label.startswith("-") or label.endswith("-"):
            return False

    return bool(_TLD.match(labels[-1]))


def _encode_host(host: str) -> Optional[str]:
    """Lowercase a host and IDNA-encode it when it is not plain ASCII."""
    host = host.lower()
    if host.isascii():
        return host
    try:
        return host.encode("idna").decode("ascii")
    except UnicodeError:
        return None


# ============================================================================
# Canonicalization
# ============================================================================

def clean_pasted(raw: str) -> str:
    """Trim whitespace and wrapping punctuation such as <...> or "..."."""
    s = str(raw or "").strip()
    s = _WRAP_LEADING.sub("", s)
    s = _WRAP_TRAILING.sub("", s)
    return s.strip()


def _split(url: str) -> Optional[SplitResult]:
    try:
        parts = urlsplit(url)
        # Accessing .port validates it.
        parts.port
    except ValueError:
        return None
    return parts


def _userinfo(parts: SplitResult) -> str:
    netloc = parts.netloc
    if "@" not in netloc:
        return ""
    return netloc.rsplit("@", 1)[0]


def parse_url(url: str) -> Optional[NormalizedUrl]:
    """Split an absolute http(s) URL into a NormalizedUrl without validating the host.

    Returns:
        NormalizedUrl, or None when the string is not an absolute http(s) URL
    """
    parts = _split(url)
    if parts is None:
        return None

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES or not parts.hostname:
        return None

    host = _encode_host(parts.hostname)
    if host is None:
        return None

    port = parts.port
    if port == DEFAULT_PORTS.get(scheme):
        port = None

    return NormalizedUrl(
        scheme=scheme,
        host=host,
        path=quote(parts.path, safe=_PATH_SAFE) or "/",
        query=quote(parts.query, safe=_QUERY_SAFE),
        fragment=quote(parts.fragment, safe=_QUERY_SAFE),
        port=port,
        userinfo=_userinfo(parts),
    )


def normalize_url(raw: str) -> NormalizeResult:
    """Validate and canonicalize one raw URL string.

    Args:
        raw: Pasted or imported text

    Returns:
        NormalizeResult with the canonical URL, or a failure reason
    """
    s = clean_pasted(raw)
    if not s:
        return NormalizeResult.failure(REASON_EMPTY)

    # "example.com" -> "https://example.com"
    if not _SCHEME_PREFIX.match(s):
        s = "https://" + s

    parts = _split(s)
    if parts is None:
        return NormalizeResult.failure(REASON_UNPARSABLE)

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return NormalizeResult.failure(REASON_SCHEME)

    if not parts.hostname:
        return NormalizeResult.failure(REASON_UNPARSABLE)

    parsed = parse_url(s)
    if parsed is None or not is_valid_host(parsed.host):
        return NormalizeResult.failure(REASON_HOST)

    return NormalizeResult.success(parsed)


# ============================================================================
# Privacy Modes
# ============================================================================

def _is_tracking_param(segment: str) -> bool:
    key = unquote_plus(segment.split("=", 1)[0]).lower()
    return key.startswith(TRACKING_PREFIX) or key in TRACKING_PARAMS


def strip_tracking(url: str) -> str:
    """Remove utm_* and known click-id parameters, keeping the rest and the fragment."""
    parsed = parse_url(url)
    if parsed is None:
        return url
    if not parsed.query:
        return parsed.to_string()

    kept = [seg for seg in parsed.query.split("&") if seg and not _is_tracking_param(seg)]
    return NormalizedUrl(
        scheme=parsed.scheme,
        host=parsed.host,
        path=parsed.path,
        query="&".join(kept),
        fragment=parsed.fragment,
        port=parsed.port,
        userinfo=parsed.userinfo,
    ).to_string()


def strip_all(url: str) -> str:
    """Remove the entire query string and fragment."""
    parsed = parse_url(url)
    if parsed is None:
        return url
    return NormalizedUrl(
        scheme=parsed.scheme,
        host=parsed.host,
        path=parsed.path,
        port=parsed.port,
        userinfo=parsed.userinfo,
    ).to_string()


def apply_privacy_mode(url: str, mode: PrivacyMode | str = PrivacyMode.FULL) -> str:
    """Apply a privacy mode to an already-canonical URL.

    Args:
        url: Canonical URL string
        mode: full (identity), stripTracking or stripAll

    Returns:
        URL with the mode applied; unparsable input is returned unchanged
    """
    mode_value = mode.value if isinstance(mode, PrivacyMode) else str(mode or "")
    if mode_value == PrivacyMode.STRIP_ALL.value:
        return strip_all(url)
    if mode_value == PrivacyMode.STRIP_TRACKING.value:
        return strip_tracking(url)
    return url
