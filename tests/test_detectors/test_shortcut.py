"""Unit tests for .url and .webloc extraction."""

import unittest

from linkpack.detectors.base import Payload
from linkpack.detectors.shortcut import (
    detect_internet_shortcut,
    detect_plist,
    extract_internet_shortcut_url,
    extract_plist_url,
    looks_like_internet_shortcut,
    looks_like_plist,
)


WEBLOC = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
    <key>URL</key>
    <string>https://a.com/?x=1&amp;y=2</string>
</dict>
</plist>
"""


class TestInternetShortcut(unittest.TestCase):
    """Test suite for [InternetShortcut] documents."""

    def test_crlf_document(self):
        text = "[InternetShortcut]\r\nURL=https://a.com/\r\nIconIndex=0\r\n"
        self.assertEqual(extract_internet_shortcut_url(text), "https://a.com/")

    def test_key_is_case_insensitive(self):
        self.assertEqual(extract_internet_shortcut_url("[InternetShortcut]\nurl = https://b.com \n"), "https://b.com")

    def test_missing_key(self):
        self.assertIsNone(extract_internet_shortcut_url("[InternetShortcut]\nIconIndex=0\n"))
        self.assertIsNone(extract_internet_shortcut_url("[InternetShortcut]\nURL=\n"))

    def test_detect(self):
        detection = detect_internet_shortcut(Payload("[InternetShortcut]\nURL=https://a.com/\n", name="a.url"))

        self.assertEqual(detection.source, ".url shortcut")
        self.assertEqual(detection.urls, ["https://a.com/"])

    def test_signature(self):
        self.assertTrue(looks_like_internet_shortcut("\n[internetshortcut]\nURL=x"))
        self.assertFalse(looks_like_internet_shortcut("URL=https://a.com"))


class TestPlist(unittest.TestCase):
    """Test suite for property-list documents."""

    def test_url_key_with_entities(self):
        self.assertEqual(extract_plist_url(WEBLOC), "https://a.com/?x=1&y=2")

    def test_first_http_string_fallback(self):
        text = "<plist><dict><key>Other</key><string>https://f.com</string></dict></plist>"
        self.assertEqual(extract_plist_url(text), "https://f.com")

    def test_no_url(self):
        self.assertIsNone(extract_plist_url("<plist><dict><key>Name</key><string>x</string></dict></plist>"))
        self.assertIsNone(detect_plist(Payload("<plist></plist>", name="a.webloc")))

    def test_detect(self):
        detection = detect_plist(Payload(WEBLOC, name="a.webloc"))

        self.assertEqual(detection.source, ".webloc file")
        self.assertEqual(detection.urls, ["https://a.com/?x=1&y=2"])

    def test_signature(self):
        self.assertTrue(looks_like_plist(WEBLOC))
        self.assertFalse(looks_like_plist("<plistish>"))


if __name__ == "__main__":
    unittest.main()
