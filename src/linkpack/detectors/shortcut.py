"""Shortcut-file (.url and .webloc) URL extraction."""

import html
import re
from typing import Optional

from linkpack.detectors.base import Detection, Payload, url_detection


URL_FILE_LABEL = ".url shortcut"
WEBLOC_LABEL = ".webloc file"

_URL_KEY = re.compile(r"^[ \t]*URL[ \t]*=[ \t]*(.+?)[ \t]*$", re.IGNORECASE | re.MULTILINE)
_INTERNET_SHORTCUT = re.compile(r"^\s*\[InternetShortcut\]", re.IGNORECASE | re.MULTILINE)
_PLIST = re.compile(r"<plist[\s>]", re.IGNORECASE)
_PLIST_URL_KEY = re.compile(
    r"<key>\s*URL\s*</key>\s*<string>\s*([^<]+?)\s*</string>", re.IGNORECASE
)
_PLIST_HTTP_STRING = re.compile(r"<string>\s*(https?://[^<]+?)\s*</string>", re.IGNORECASE)


def looks_like_internet_shortcut(text: str) -> bool:
    return bool(_INTERNET_SHORTCUT.search(text or ""))


def looks_like_plist(text: str) -> bool:
    return bool(_PLIST.search(text or ""))


def extract_internet_shortcut_url(text: str) -> Optional[str]:
    """First URL= value of a key=value shortcut document."""
    match = _URL_KEY.search(text or "")
    if not match:
        return None
    return match.group(1).strip() or None


def extract_plist_url(text: str) -> Optional[str]:
    """String following a URL key, else the first http(s) string value."""
    for pattern in (_PLIST_URL_KEY, _PLIST_HTTP_STRING):
        match = pattern.search(text or "")
        if match:
            value = html.unescape(match.group(1)).strip()
            if value:
                return value
    return None


def detect_internet_shortcut(payload: Payload) -> Optional[Detection]:
    url = extract_internet_shortcut_url(payload.clean_text)
    if url is None:
        return None
    return url_detection(URL_FILE_LABEL, [url])


def detect_plist(payload: Payload) -> Optional[Detection]:
    url = extract_plist_url(payload.clean_text)
    if url is None:
        return None
    return url_detection(WEBLOC_LABEL, [url])
