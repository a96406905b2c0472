"""Safe, cross-platform, collision-free filenames.

Used-name sets are always passed in by the caller and must be scoped to
a single plan, export or archive call.
"""

import re
import unicodedata
from typing import Optional
from urllib.parse import urlsplit

from linkpack.core.constants import (
    FILENAME_FALLBACK,
    FILENAME_MAX_LENGTH,
    GENERIC_HOSTS,
    KNOWN_NAME_EXTENSIONS,
    OutputType,
    RESERVED_DEVICE_NAMES,
)

_SEPARATORS = re.compile(r"[/\\]")
_ILLEGAL = re.compile(r'[<>:"|?*]')
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")
_DOTS = re.compile(r"\.{2,}")
_HYPHENS = re.compile(r"-{2,}")
_TRAILING_DOT_SPACE = re.compile(r"[. ]+$")
_UNSAFE_BASE = re.compile(r"[^a-z0-9._-]", re.IGNORECASE)
_UNDERSCORES = re.compile(r"_+")
_KNOWN_EXT = re.compile(
    r"\.(%s)$" % "|".join(KNOWN_NAME_EXTENSIONS), re.IGNORECASE
)


def safe_base_name_from_url(url: str) -> str:
    """Derive a short, human-friendly base name from a URL.

    The host minus "www." and minus its final label is used; when that is
    empty or one of GENERIC_HOSTS the first non-empty path segment is appended.
    """
    try:
        parts = urlsplit(str(url or ""))
        host = (parts.hostname or "").lower()
        path = parts.path or ""
    except ValueError:
        return FILENAME_FALLBACK

    if host.startswith("www."):
        host = host[4:]

    labels = [label for label in host.split(".") if label]
    base = ".".join(labels[:-1]) if len(labels) >= 2 else (labels[0] if labels else "")

    if not base or base in GENERIC_HOSTS:
        segments = [seg.strip() for seg in path.split("/") if seg.strip()]
        if segments:
            base = f"{base or FILENAME_FALLBACK}-{segments[0]}"

    return base or FILENAME_FALLBACK


def _split_extension(name: str) -> tuple[str, str]:
    dot = name.rfind(".")
    if dot < 0:
        return name, ""
    return name[:dot], name[dot:]


def sanitize_filename(
    name: str,
    *,
    fallback: str = FILENAME_FALLBACK,
    max_length: int = FILENAME_MAX_LENGTH,
) -> str:
    """Make a filename safe on Windows, macOS and Linux.

    Args:
        name: Candidate filename (may include an extension)
        fallback: Used when nothing survives sanitization
        max_length: Maximum length; a short extension is preserved when truncating

    Returns:
        Sanitized filename, never empty
    """
    fallback = (fallback or "").strip() or FILENAME_FALLBACK

    s = unicodedata.normalize("NFKC", str(name or "").strip())

    s = _SEPARATORS.sub("-", s)
    s = _ILLEGAL.sub("-", s)
    s = _CONTROL.sub("", s)

    s = _WHITESPACE.sub(" ", s).strip()
    s = _DOTS.sub(".", s)
    s = _HYPHENS.sub("-", s).strip()

    # Windows forbids a trailing dot or space
    s = _TRAILING_DOT_SPACE.sub("", s)

    if not s:
        s = fallback

    base, ext = _split_extension(s)
    if base.lower() in RESERVED_DEVICE_NAMES:
        s = f"_{base}{ext}"

    if len(s) > max_length:
        dot = s.rfind(".")
        if dot > 0 and len(s) - dot <= 10:
            ext = s[dot:]
            keep = max(1, max_length - len(ext))
            s = _TRAILING_DOT_SPACE.sub("", s[:dot][:keep]) + ext
        else:
            s = _TRAILING_DOT_SPACE.sub("", s[:max_length])

    return s or fallback


def ensure_extension(name: str, ext: str) -> str:
    """Append ".ext" unless the name already ends with it (case-insensitive)."""
    trimmed = str(name or "").strip()
    ext = str(ext or "").strip().lstrip(".")
    if not trimmed or not ext:
        return trimmed
    if trimmed.lower().endswith("." + ext.lower()):
        return trimmed
    return f"{trimmed}.{ext}"


def ensure_safe_filename(name: str, ext: str, *, fallback: str = FILENAME_FALLBACK) -> str:
    """Add the extension, sanitize, then enforce the extension again."""
    cleaned = sanitize_filename(ensure_extension(name, ext), fallback=fallback)
    return ensure_extension(cleaned, ext)


def make_unique_filename(name: str, used_names: set[str]) -> str:
    """Return name, or the first free "base-N.ext" variant, and record it as used.

    Args:
        name: Candidate filename
        used_names: Names already taken in this call's scope (mutated)

    Returns:
        A name not previously present in used_names
    """
    if name not in used_names:
        used_names.add(name)
        return name

    base, ext = _split_extension(name)
    i = 2
    while f"{base}-{i}{ext}" in used_names:
        i += 1
    unique = f"{base}-{i}{ext}"
    used_names.add(unique)
    return unique


def link_filename(url: str, output_type: OutputType, used_names: set[str]) -> str:
    """Derive, sanitize and uniquify the shortcut filename for one URL."""
    safe = ensure_safe_filename(safe_base_name_from_url(url), output_type.extension)
    return make_unique_filename(safe, used_names)


# ============================================================================
# Simple base names (QR images, user-typed names)
# ============================================================================

def simple_base_name(raw: str, *, limit: int = 200) -> str:
    """Restrict a base name to [A-Za-z0-9._-], collapsing runs of underscores."""
    cleaned = _UNSAFE_BASE.sub("_", str(raw or ""))
    cleaned = _UNDERSCORES.sub("_", cleaned)
    return cleaned[:limit]


def make_unique_base(base: str, used_bases: set[str], *, limit: int = 200) -> str:
    """Uniquify an extension-less base name as "base", "base-2", "base-3", ..."""
    b = (str(base or "") or FILENAME_FALLBACK)[:limit]
    if b not in used_bases:
        used_bases.add(b)
        return b
    i = 2
    while f"{b}-{i}" in used_bases:
        i += 1
    unique = f"{b}-{i}"
    used_bases.add(unique)
    return unique


def single_download_name(
    url: str,
    output_type: OutputType,
    name: Optional[str] = None,
) -> str:
    """Filename for a single rendered shortcut.

    A user-supplied name wins (known extensions stripped, unsafe characters
    replaced); otherwise the name is derived from the URL.
    """
    user_base = _KNOWN_EXT.sub("", str(name or "").strip()).strip()
    user_base = simple_base_name(user_base)
    if user_base:
        return f"{user_base}.{output_type.extension}"
    return ensure_safe_filename(safe_base_name_from_url(url), output_type.extension)
