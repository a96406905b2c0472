"""Unit tests for HTML redirect page and bookmark export extraction."""

import unittest

from linkpack.detectors.base import Payload
from linkpack.detectors.markup import (
    detect_markup,
    extract_markup_urls,
    looks_like_bookmark_export,
    looks_like_html,
)
from linkpack.renderers.shortcuts import ShortcutRenderer


BOOKMARK_EXPORT = """<!DOCTYPE NETSCAPE-Bookmark-file-1>
<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">
<TITLE>Bookmarks</TITLE>
<H1>Bookmarks</H1>
<DL><p>
    <DT><H3>Folder</H3>
    <DL><p>
        <DT><A HREF="https://a.com/" ADD_DATE="1">A</A>
        <DT><A HREF="https://b.com/?x=1&amp;y=2">B</A>
    </DL><p>
    <DT><A HREF="https://c.com/">C</A>
</DL><p>
"""


class TestExtractMarkupUrls(unittest.TestCase):
    """Test suite for extract_markup_urls."""

    def test_meta_refresh(self):
        html = '<html><head><meta http-equiv="refresh" content="0; url=https://example.com/"></head></html>'
        self.assertEqual(extract_markup_urls(html), ["https://example.com/"])

    def test_meta_refresh_quoted_target(self):
        html = "<html><head><meta http-equiv=\"Refresh\" content=\"5;URL='https://q.com/x'\"></head></html>"
        self.assertEqual(extract_markup_urls(html), ["https://q.com/x"])

    def test_meta_refresh_beats_anchors(self):
        html = (
            '<html><head><meta http-equiv="refresh" content="0; url=https://target.com/"></head>'
            '<body><a href="https://other.com/">x</a></body></html>'
        )
        self.assertEqual(extract_markup_urls(html), ["https://target.com/"])

    def test_script_location(self):
        html = '<html><script>window.location.replace("https://js.com/a")</script></html>'
        self.assertEqual(extract_markup_urls(html), ["https://js.com/a"])

        html = "<html><script>window.location.href = 'https://js.com/b';</script></html>"
        self.assertEqual(extract_markup_urls(html), ["https://js.com/b"])

    def test_bookmark_export_returns_every_anchor(self):
        self.assertEqual(
            extract_markup_urls(BOOKMARK_EXPORT),
            ["https://a.com/", "https://b.com/?x=1&y=2", "https://c.com/"],
        )

    def test_plain_page_returns_first_anchor(self):
        html = '<html><body><a href="https://a.com">a</a><a href="https://b.com">b</a></body></html>'
        self.assertEqual(extract_markup_urls(html), ["https://a.com"])

    def test_bare_url_token(self):
        html = "<html><body>Visit https://bare.com/x now</body></html>"
        self.assertEqual(extract_markup_urls(html), ["https://bare.com/x"])

    def test_nothing_found(self):
        self.assertEqual(extract_markup_urls("<html><body>hello</body></html>"), [])
        self.assertIsNone(detect_markup(Payload("<html></html>", name="x.html")))

    def test_rendered_redirect_round_trip(self):
        """Test that a generated redirect page is read back to its URL."""
        url = "https://example.com/?a=1&b=2"
        html = ShortcutRenderer().render_html(url)

        detection = detect_markup(Payload(html, name="example.html"))

        self.assertEqual(detection.source, "HTML file")
        self.assertEqual(detection.urls, [url])


class TestSignatures(unittest.TestCase):

    def test_looks_like_html(self):
        self.assertTrue(looks_like_html("<!DOCTYPE html><p>x"))
        self.assertTrue(looks_like_html("<HTML lang='en'>"))
        self.assertFalse(looks_like_html("<htmlish>"))

    def test_looks_like_bookmark_export(self):
        self.assertTrue(looks_like_bookmark_export(BOOKMARK_EXPORT))
        self.assertFalse(looks_like_bookmark_export("a.com\nb.com"))


if __name__ == "__main__":
    unittest.main()
