"""Shared types for import format detectors.

Every detector is a pure function ``(Payload) -> Optional[Detection]``:
None means "not my format". Detectors never raise.
"""

import re
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Callable, Optional

from linkpack.core.constants import DetectionKind


_URL_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_WWW = re.compile(r"^www\.", re.IGNORECASE)
_DOMAIN_TOKEN = re.compile(r"[a-z0-9-]+\.[a-z]{2,}", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s")
_BOM = "\ufeff"


@dataclass(frozen=True)
class Payload:
    """Decoded import text plus whatever the caller declared about it."""
    text: str
    name: str = ""
    media_type: str = ""

    @property
    def extension(self) -> str:
        return PurePath(self.name.lower()).suffix.lstrip(".") if self.name else ""

    def declares(self, *extensions: str) -> bool:
        return self.extension in extensions

    def media_has(self, fragment: str) -> bool:
        return fragment in (self.media_type or "").lower()

    @property
    def clean_text(self) -> str:
        text = self.text or ""
        return text[1:] if text.startswith(_BOM) else text


@dataclass
class Detection:
    """URLs (or a session object) a detector pulled out of a payload."""
    kind: DetectionKind
    source: str                               # human label, e.g. "CSV file"
    urls: list[str] = field(default_factory=list)
    session: Optional[dict[str, Any]] = None


Detector = Callable[[Payload], Optional[Detection]]


def looks_url_like(value: Any) -> bool:
    """Cheap URL-likeness check used before real canonicalization.

    True for scheme-prefixed values, "www."-prefixed values and
    whitespace-free tokens containing a label.tld pair.
    """
    if value is None or isinstance(value, (dict, list, bool)):
        return False
    s = str(value).strip()
    if not s:
        return False
    if _URL_SCHEME.match(s) or _WWW.match(s):
        return True
    return bool(_DOMAIN_TOKEN.search(s)) and not _WHITESPACE.search(s)


def url_detection(source: str, urls: list[str]) -> Detection:
    return Detection(kind=DetectionKind.URLS, source=source, urls=[u.strip() for u in urls if u and u.strip()])
