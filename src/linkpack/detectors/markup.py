"""Markup (HTML redirect pages and bookmark exports) URL extraction."""

import re
from typing import Optional

from bs4 import BeautifulSoup

from linkpack.detectors.base import Detection, Payload, url_detection


SOURCE_LABEL = "HTML file"

_HTML_SIGNATURE = re.compile(r"<html[\s>]|<!doctype\s+html", re.IGNORECASE)
_BOOKMARK_SIGNATURE = re.compile(r"NETSCAPE-Bookmark-file|<DL[^>]*>|<H3[^>]*>", re.IGNORECASE)
_REFRESH_URL = re.compile(r"url\s*=\s*['\"]?([^'\"]+)", re.IGNORECASE)
_CONTENT_URL = re.compile(r"content\s*=\s*[\"'][^\"']*url\s*=\s*([^\"']+)[\"']", re.IGNORECASE)
_LOCATION_CALL = re.compile(
    r"window\.location\.(?:replace|assign)\(\s*[\"']([^\"']+)[\"']\s*\)", re.IGNORECASE
)
_LOCATION_HREF = re.compile(r"window\.location\.href\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
_BARE_URL = re.compile(r"\bhttps?://[^\s\"'<>]+", re.IGNORECASE)


def looks_like_html(text: str) -> bool:
    return bool(_HTML_SIGNATURE.search(text or ""))


def looks_like_bookmark_export(text: str) -> bool:
    return bool(_BOOKMARK_SIGNATURE.search(text or ""))


def _meta_refresh_target(soup: BeautifulSoup, text: str) -> Optional[str]:
    for meta in soup.find_all("meta"):
        if str(meta.get("http-equiv", "")).strip().lower() != "refresh":
            continue
        match = _REFRESH_URL.search(str(meta.get("content", "")))
        if match and match.group(1).strip():
            return match.group(1).strip()

    match = _CONTENT_URL.search(text)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return None


def _script_redirect_target(text: str) -> Optional[str]:
    for pattern in (_LOCATION_CALL, _LOCATION_HREF):
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return None


def extract_markup_urls(text: str) -> list[str]:
    """Pull link targets out of HTML.

    Order: meta refresh, script location assignment, every anchor of a
    bookmark export, the first anchor, the first bare http(s) token.
    """
    text = text or ""
    soup = BeautifulSoup(text, "html.parser")

    target = _meta_refresh_target(soup, text) or _script_redirect_target(text)
    if target:
        return [target]

    anchors = [a["href"].strip() for a in soup.find_all("a", href=True) if a["href"].strip()]

    if looks_like_bookmark_export(text) and anchors:
        return anchors

    if anchors:
        return anchors[:1]

    match = _BARE_URL.search(text)
    if match:
        return [match.group(0)]

    return []


def detect_markup(payload: Payload) -> Optional[Detection]:
    urls = extract_markup_urls(payload.clean_text)
    if not urls:
        return None
    return url_detection(SOURCE_LABEL, urls)
