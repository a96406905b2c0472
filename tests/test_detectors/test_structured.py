"""Unit tests for structured (JSON) URL extraction.

Tests cover session delegation, browser bookmark trees, arrays of records
and primitives, well-known list keys and single records.
"""

import json
import unittest

from linkpack.core.constants import DetectionKind, SESSION_KIND
from linkpack.detectors.base import Payload
from linkpack.detectors.structured import (
    detect_structured,
    extract_bookmark_tree,
    extract_url_from_record,
)


def _payload(obj, name="data.json") -> Payload:
    return Payload(json.dumps(obj), name=name)


def _place(uri: str) -> dict:
    return {"type": "text/x-moz-place", "uri": uri}


def _folder(children: list, **extra) -> dict:
    return {"type": "text/x-moz-place-container", "children": children, **extra}


class TestSessionDelegation(unittest.TestCase):

    def test_session_is_returned_verbatim(self):
        session = {"version": 1, "kind": SESSION_KIND, "input": {"lines": ["a.com", "a.com", "junk"]}}

        detection = detect_structured(_payload(session))

        self.assertEqual(detection.kind, DetectionKind.SESSION)
        self.assertEqual(detection.session, session)
        self.assertEqual(detection.urls, ["a.com", "a.com", "junk"])

    def test_wrong_version_is_not_a_session(self):
        obj = {"version": 2, "kind": SESSION_KIND, "input": {"lines": ["a.com"]}}

        detection = detect_structured(_payload(obj))

        self.assertNotEqual(detection.kind if detection else None, DetectionKind.SESSION)


class TestBookmarkTrees(unittest.TestCase):
    """Test suite for Firefox and Chromium bookmark files."""

    def test_firefox_prefers_toolbar(self):
        tree = _folder([
            _folder([_place("https://menu.com")], root="bookmarksMenuFolder"),
            _folder([_place("https://t1.com"), _folder([_place("https://t2.com")])], root="toolbarFolder"),
        ], root="placesRoot")

        detection = detect_structured(_payload(tree))

        self.assertEqual(detection.urls, ["https://t1.com", "https://t2.com"])

    def test_firefox_whole_tree_without_toolbar(self):
        tree = _folder([
            _folder([_place("https://a.com"), _place("https://b.com")], root="bookmarksMenuFolder"),
            _place("https://c.com"),
        ])

        self.assertEqual(extract_bookmark_tree(tree), ["https://a.com", "https://b.com", "https://c.com"])

    def test_firefox_empty_toolbar_falls_back(self):
        tree = _folder([
            _folder([], guid="toolbar_____"),
            _folder([_place("https://a.com")], root="unfiledBookmarksFolder"),
        ])

        self.assertEqual(extract_bookmark_tree(tree), ["https://a.com"])

    def test_chromium_roots_order(self):
        """Test that bookmark_bar, other and synced roots are read in that order."""
        bookmarks = {
            "version": 1,
            "roots": {
                "synced": {"children": [{"type": "url", "url": "https://s.com"}]},
                "other": {"children": [{"type": "url", "url": "https://o.com"}]},
                "bookmark_bar": {"children": [
                    {"type": "url", "url": "https://b1.com"},
                    {"type": "folder", "children": [{"type": "url", "url": "https://b2.com"}]},
                ]},
            },
        }

        detection = detect_structured(_payload(bookmarks, name="Bookmarks"))

        self.assertEqual(detection.urls, ["https://b1.com", "https://b2.com", "https://o.com", "https://s.com"])


class TestRecords(unittest.TestCase):
    """Test suite for arrays, list keys and single records."""

    def test_array_of_records(self):
        records = [
            {"Title": "A", "URL": "https://a.com"},
            {"title": "B", "link": "b.com"},
            {"title": "no url"},
        ]

        self.assertEqual(detect_structured(_payload(records)).urls, ["https://a.com", "b.com"])

    def test_array_of_primitives(self):
        values = ["https://a.com", "nope", 5, None, " b.org "]

        self.assertEqual(detect_structured(_payload(values)).urls, ["https://a.com", "b.org"])

    def test_list_key_is_case_insensitive(self):
        obj = {"meta": {"count": 1}, "Links": ["https://a.com"]}

        self.assertEqual(detect_structured(_payload(obj)).urls, ["https://a.com"])

    def test_single_record(self):
        obj = {"title": "A", "href": "https://a.com"}

        self.assertEqual(detect_structured(_payload(obj)).urls, ["https://a.com"])

    def test_legacy_raw_field(self):
        rows = [{"raw": "https://a.com", "filename": "a.html"}]

        self.assertEqual(detect_structured(_payload(rows)).urls, ["https://a.com"])

    def test_url_key_priority(self):
        record = {"link": "https://link.com", "url": "https://url.com"}

        self.assertEqual(extract_url_from_record(record), "https://url.com")

    def test_non_url_value_skipped(self):
        self.assertEqual(extract_url_from_record({"url": "n/a", "website": "site.com"}), "site.com")
        self.assertIsNone(extract_url_from_record("https://a.com"))


class TestDetectStructuredEdges(unittest.TestCase):

    def test_invalid_json(self):
        self.assertIsNone(detect_structured(Payload("{nope", name="x.json")))

    def test_empty_array_gives_empty_detection(self):
        detection = detect_structured(Payload("[]"))

        self.assertIsNotNone(detection)
        self.assertEqual(detection.urls, [])

    def test_scalar_json(self):
        self.assertIsNone(detect_structured(Payload("42")))


if __name__ == "__main__":
    unittest.main()
