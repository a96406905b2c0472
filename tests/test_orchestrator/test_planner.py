"""Unit tests for the batch planner.

Tests cover line splitting, partitioning into valid and invalid items,
privacy modes, the dedupe tiers and order preservation.
"""

import unittest

from linkpack.core.constants import DedupeMode, OutputType, PrivacyMode
from linkpack.core.models import BatchOptions
from linkpack.orchestrator.planner import build_plan, parse_batch_text


class TestParseBatchText(unittest.TestCase):

    def test_splits_any_newline_convention(self):
        text = "a.com\r\n\r\n  b.com  \rc.com\n\n"
        self.assertEqual(parse_batch_text(text), ["a.com", "b.com", "c.com"])

    def test_empty_text(self):
        self.assertEqual(parse_batch_text(""), [])
        self.assertEqual(parse_batch_text(None), [])


class TestBuildPlan(unittest.TestCase):
    """Test suite for build_plan."""

    def test_loose_dedupe_folds_variants(self):
        """Test that scheme, case and trailing slash variants collapse under loose."""
        plan = build_plan(
            "example.com\nhttp://example.com/\nEXAMPLE.COM",
            BatchOptions(dedupe_mode=DedupeMode.LOOSE),
        )

        self.assertEqual(len(plan.valid), 3)
        self.assertEqual(len(plan.deduped), 1)
        self.assertEqual(plan.removed_count, 2)
        self.assertEqual(plan.deduped[0].raw, "example.com")

    def test_strip_tracking_privacy_mode(self):
        plan = build_plan(
            "https://a.com?utm_source=x&keep=1",
            privacy_mode=PrivacyMode.STRIP_TRACKING,
        )

        item = plan.deduped[0]
        self.assertEqual(item.effective_url, "https://a.com/?keep=1")
        self.assertEqual(item.normalized_url, "https://a.com/?utm_source=x&keep=1")
        self.assertNotIn("utm_source", item.effective_url)

    def test_empty_input(self):
        plan = build_plan("")

        self.assertEqual(plan.lines, [])
        self.assertEqual(plan.valid, [])
        self.assertEqual(plan.invalid, [])
        self.assertEqual(plan.deduped, [])
        self.assertEqual(plan.removed_count, 0)
        self.assertTrue(plan.is_empty)

    def test_invalid_line_is_collected(self):
        plan = build_plan("not a url")

        self.assertEqual(len(plan.invalid), 1)
        self.assertEqual(plan.invalid[0].raw, "not a url")
        self.assertTrue(plan.invalid[0].reason)
        self.assertEqual(plan.valid, [])
        self.assertEqual(plan.deduped, [])
        self.assertEqual(plan.removed_count, 0)
        self.assertFalse(plan.is_empty)
        self.assertFalse(plan.has_valid)

    def test_mixed_input_keeps_going(self):
        plan = build_plan("https://a.com\nftp://b.com\nnot a url\nhttps://c.com")

        self.assertEqual([i.raw for i in plan.valid], ["https://a.com", "https://c.com"])
        self.assertEqual([i.raw for i in plan.invalid], ["ftp://b.com", "not a url"])
        self.assertTrue(plan.has_valid)

    def test_exact_dedupe(self):
        plan = build_plan("https://example.com\nhttps://EXAMPLE.com/\nhttp://example.com/")

        self.assertEqual(len(plan.deduped), 2)
        self.assertEqual(plan.removed_count, 1)

    def test_dedupe_uses_effective_url(self):
        plan = build_plan(
            "https://a.com/?utm_source=x\nhttps://a.com/?utm_source=y",
            privacy_mode=PrivacyMode.STRIP_TRACKING,
        )

        self.assertEqual(len(plan.deduped), 1)
        self.assertEqual(plan.removed_count, 1)

    def test_dedupe_disabled(self):
        plan = build_plan("a.com\na.com\nb.com", BatchOptions(dedupe=False))

        self.assertEqual(plan.deduped, plan.valid)
        self.assertEqual(plan.removed_count, 0)

    def test_order_is_preserved(self):
        plan = build_plan("b.com\na.com\nb.com\nc.com\na.com")

        self.assertEqual([i.raw for i in plan.deduped], ["b.com", "a.com", "c.com"])
        self.assertEqual(plan.removed_count, len(plan.valid) - len(plan.deduped))

    def test_items_carry_dedupe_key_and_source(self):
        plan = build_plan(
            "http://www.a.com/x/",
            BatchOptions(dedupe_mode=DedupeMode.LOOSE),
            source="import",
        )

        self.assertEqual(plan.deduped[0].dedupe_key, "https://a.com/x")
        self.assertEqual(plan.deduped[0].source, "import")

    def test_plan_settings(self):
        options = BatchOptions(export_csv=False)
        plan = build_plan("a.com", options, output_type=OutputType.WEBLOC, archive_base_name="")

        self.assertIs(plan.options, options)
        self.assertEqual(plan.output_type, OutputType.WEBLOC)
        self.assertEqual(plan.archive_base_name, "links")

    def test_logs_summary(self):
        with self.assertLogs("linkpack.orchestrator.planner", level="INFO") as logs:
            build_plan("a.com\na.com\nnope")

        self.assertTrue(any("1 unique" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
