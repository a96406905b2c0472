"""Unit tests for dedupe keys and URLDeduper.

Tests for the exact, loose and aggressive key tiers, raw-string fallback,
and first-occurrence-wins deduplication.
"""

import unittest

from linkpack.core.constants import DedupeMode
from linkpack.urls.deduper import URLDeduper, dedupe_key


class TestDedupeKey(unittest.TestCase):
    """Test suite for dedupe_key."""

    def test_exact_lowercases_host(self):
        self.assertEqual(dedupe_key("https://Example.COM/A", DedupeMode.EXACT), "https://example.com/A")

    def test_exact_keeps_scheme_and_www(self):
        self.assertNotEqual(
            dedupe_key("http://www.example.com/", DedupeMode.EXACT),
            dedupe_key("https://example.com/", DedupeMode.EXACT),
        )

    def test_loose_folds_scheme_www_and_trailing_slash(self):
        key = dedupe_key("http://www.example.com/docs/", DedupeMode.LOOSE)
        self.assertEqual(key, "https://example.com/docs")

    def test_loose_keeps_root_slash(self):
        self.assertEqual(dedupe_key("https://example.com/", DedupeMode.LOOSE), "https://example.com/")

    def test_loose_drops_default_port(self):
        self.assertEqual(
            dedupe_key("https://example.com:443/a", DedupeMode.LOOSE),
            dedupe_key("https://example.com/a", DedupeMode.LOOSE),
        )

    def test_loose_keeps_query_order(self):
        self.assertNotEqual(
            dedupe_key("https://a.com/?b=2&a=1", DedupeMode.LOOSE),
            dedupe_key("https://a.com/?a=1&b=2", DedupeMode.LOOSE),
        )

    def test_aggressive_collapses_slashes_and_sorts_query(self):
        key = dedupe_key("https://www.example.com//a//b/?b=2&a=1", DedupeMode.AGGRESSIVE)
        self.assertEqual(key, "https://example.com/a/b?a=1&b=2")

    def test_query_value_case_is_significant(self):
        """Test that query values differing only by case stay distinct."""
        for mode in (DedupeMode.LOOSE, DedupeMode.AGGRESSIVE):
            with self.subTest(mode=mode):
                self.assertNotEqual(
                    dedupe_key("https://a.com/?q=A", mode),
                    dedupe_key("https://a.com/?q=a", mode),
                )

    def test_unparsable_falls_back_to_raw(self):
        self.assertEqual(dedupe_key("not a url", DedupeMode.AGGRESSIVE), "not a url")
        self.assertEqual(dedupe_key(None), "")

    def test_string_mode_accepted(self):
        self.assertEqual(dedupe_key("http://www.a.com/x/", "loose"), "https://a.com/x")
        # unknown modes behave like exact
        self.assertEqual(dedupe_key("http://www.a.com/x/", "fuzzy"), "http://www.a.com/x/")


class TestURLDeduper(unittest.TestCase):
    """Test suite for URLDeduper."""

    def test_deduplicate_preserves_first_occurrence_order(self):
        deduper = URLDeduper(DedupeMode.LOOSE)
        urls = [
            "https://b.com/",
            "https://a.com/x",
            "http://www.b.com/",
            "https://a.com/x/",
            "https://c.com/",
        ]

        self.assertEqual(deduper.deduplicate(urls), ["https://b.com/", "https://a.com/x", "https://c.com/"])

    def test_deduplicate_items_counts_removals(self):
        deduper = URLDeduper()
        items = [("one", "https://a.com/"), ("two", "https://a.com/"), ("three", "https://b.com/")]

        kept, removed = deduper.deduplicate_items(items, lambda item: item[1])

        self.assertEqual([name for name, _ in kept], ["one", "three"])
        self.assertEqual(removed, 1)

    def test_calls_do_not_share_state(self):
        deduper = URLDeduper()
        self.assertEqual(deduper.deduplicate(["https://a.com/"]), ["https://a.com/"])
        self.assertEqual(deduper.deduplicate(["https://a.com/"]), ["https://a.com/"])

    def test_get_duplicates(self):
        deduper = URLDeduper(DedupeMode.LOOSE)
        groups = deduper.get_duplicates(["https://a.com/x", "http://a.com/x/", "https://b.com/"])

        self.assertEqual(groups, {"https://a.com/x": ["https://a.com/x", "http://a.com/x/"]})


if __name__ == "__main__":
    unittest.main()
