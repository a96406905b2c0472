"""Structured-record (JSON) URL extraction.

Rules are tried in priority order:
1. linkpack session file, delegated verbatim
2. Firefox-style bookmark tree (prefers the toolbar subtree)
3. Chromium-style bookmarks file with a named "roots" container
4. Top-level array of records or primitives
5. Object holding a well-known list key (urls, links, items, ...)
6. The object itself treated as a single record
"""

import json
from typing import Any, Optional

from linkpack.core.constants import DetectionKind, RECORD_LIST_KEYS, RECORD_URL_KEYS
from linkpack.detectors.base import Detection, Payload, looks_url_like, url_detection
from linkpack.storage.session import is_valid_session


SOURCE_LABEL = "JSON file"
SESSION_LABEL = "batch file"

_MOZ_PLACE = "text/x-moz-place"
_MOZ_CONTAINER = "text/x-moz-place-container"
_CHROME_ROOT_ORDER = ("bookmark_bar", "other", "synced")

_MISSING = object()


def load_json(text: str) -> Any:
    """Parse JSON, returning a sentinel instead of raising on bad input."""
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return _MISSING


# ============================================================================
# Firefox bookmark trees
# ============================================================================

def _is_moz_place(node: Any) -> bool:
    return isinstance(node, dict) and (node.get("type") == _MOZ_PLACE or node.get("typeCode") == 1)


def _is_moz_container(node: Any) -> bool:
    return isinstance(node, dict) and (node.get("type") == _MOZ_CONTAINER or node.get("typeCode") == 2)


def looks_like_bookmark_tree(obj: Any) -> bool:
    if not isinstance(obj, dict):
        return False
    return (
        obj.get("type") in (_MOZ_CONTAINER, _MOZ_PLACE)
        or isinstance(obj.get("guid"), str)
        or isinstance(obj.get("root"), str)
        or isinstance(obj.get("children"), list)
    )


def collect_place_uris(node: Any, out: list[str]) -> list[str]:
    """Depth-first collection of leaf bookmark URIs in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if not isinstance(current, dict):
            continue
        if _is_moz_place(current) and isinstance(current.get("uri"), str):
            out.append(current["uri"])
        children = current.get("children")
        if isinstance(children, list):
            stack.extend(reversed(children))
    return out


def find_toolbar_folder(root: Any) -> Optional[dict[str, Any]]:
    stack = [root]
    while stack:
        node = stack.pop()
        if not isinstance(node, dict):
            continue
        if _is_moz_container(node) and (
            node.get("root") == "toolbarFolder"
            or node.get("guid") == "toolbar_____"
            or node.get("title") == "toolbar"
        ):
            return node
        children = node.get("children")
        if isinstance(children, list):
            stack.extend(reversed(children))
    return None


def extract_bookmark_tree(obj: Any) -> list[str]:
    toolbar = find_toolbar_folder(obj)
    if toolbar is not None:
        urls = collect_place_uris(toolbar, [])
        if urls:
            return urls
    return collect_place_uris(obj, [])


# ============================================================================
# Chromium bookmarks file
# ============================================================================

def looks_like_bookmarks_file(obj: Any) -> bool:
    return isinstance(obj, dict) and isinstance(obj.get("roots"), dict)


def _collect_chrome_urls(node: Any, out: list[str]) -> None:
    stack = [node]
    while stack:
        current = stack.pop()
        if not isinstance(current, dict):
            continue
        if isinstance(current.get("url"), str):
            out.append(current["url"])
        children = current.get("children")
        if isinstance(children, list):
            stack.extend(reversed(children))


def extract_bookmarks_file(obj: dict[str, Any]) -> list[str]:
    roots = obj["roots"]
    ordered = [name for name in _CHROME_ROOT_ORDER if name in roots]
    ordered += [name for name in roots if name not in _CHROME_ROOT_ORDER]

    urls: list[str] = []
    for name in ordered:
        if isinstance(roots[name], dict):
            _collect_chrome_urls(roots[name], urls)
    return urls


# ============================================================================
# Generic records
# ============================================================================

def extract_url_from_record(record: Any) -> Optional[str]:
    """First URL-like value under a known URL key (case-insensitive), else legacy "raw"."""
    if not isinstance(record, dict):
        return None

    lower_keys = {str(k).lower(): k for k in record}
    for key in RECORD_URL_KEYS:
        real_key = lower_keys.get(key)
        if real_key is None:
            continue
        value = record[real_key]
        if isinstance(value, str) and looks_url_like(value):
            return value

    raw = record.get("raw")
    if isinstance(raw, str) and looks_url_like(raw):
        return raw

    return None


def extract_from_array(items: list[Any]) -> list[str]:
    """Records go through extract_url_from_record; primitives are kept when URL-like."""
    urls: list[str] = []
    if items and isinstance(items[0], dict):
        for item in items:
            if isinstance(item, dict):
                url = extract_url_from_record(item)
                if url:
                    urls.append(url)
            elif item is not None and looks_url_like(item):
                urls.append(str(item).strip())
        return urls

    for item in items:
        if item is not None and looks_url_like(item):
            urls.append(str(item).strip())
    return urls


def find_list_value(obj: dict[str, Any]) -> Optional[list[Any]]:
    for key in RECORD_LIST_KEYS:
        if isinstance(obj.get(key), list):
            return obj[key]
        for real_key in obj:
            if str(real_key).lower() == key and isinstance(obj[real_key], list):
                return obj[real_key]
    return None


# ============================================================================
# Detector
# ============================================================================

def detect_structured(payload: Payload) -> Optional[Detection]:
    obj = load_json(payload.clean_text)
    if obj is _MISSING:
        return None

    if is_valid_session(obj):
        return Detection(
            kind=DetectionKind.SESSION,
            source=SESSION_LABEL,
            urls=[line for line in obj["input"]["lines"] if isinstance(line, str)],
            session=obj,
        )

    if looks_like_bookmark_tree(obj):
        urls = extract_bookmark_tree(obj)
        if urls:
            return url_detection(SOURCE_LABEL, urls)

    if looks_like_bookmarks_file(obj):
        urls = extract_bookmarks_file(obj)
        if urls:
            return url_detection(SOURCE_LABEL, urls)

    if isinstance(obj, list):
        return url_detection(SOURCE_LABEL, extract_from_array(obj))

    if isinstance(obj, dict):
        items = find_list_value(obj)
        if items is not None:
            return url_detection(SOURCE_LABEL, extract_from_array(items))

        single = extract_url_from_record(obj)
        if single:
            return url_detection(SOURCE_LABEL, [single])

    return None
