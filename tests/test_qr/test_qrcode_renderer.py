"""Unit tests for the qrcode-backed QR renderer."""

import unittest
from unittest.mock import patch

from linkpack.core.constants import QRFormat
from linkpack.core.exceptions import DependencyUnavailableError
from linkpack.core.models import QRRenderOptions
from linkpack.qr import qrcode_renderer
from linkpack.qr.qrcode_renderer import QRCODE_AVAILABLE, QRCodeRenderer


PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@unittest.skipUnless(QRCODE_AVAILABLE, "qrcode not installed")
class TestQRCodeRenderer(unittest.IsolatedAsyncioTestCase):
    """Test suite for QRCodeRenderer."""

    def setUp(self):
        self.renderer = QRCodeRenderer()

    def test_available(self):
        self.assertTrue(self.renderer.available)
        self.assertEqual(self.renderer.name, "qrcode")

    async def test_png(self):
        data = await self.renderer.render("https://example.com/", QRFormat.PNG, QRRenderOptions())

        self.assertTrue(data.startswith(PNG_SIGNATURE))

    async def test_transparent_png(self):
        options = QRRenderOptions(transparent=True, scale=2, margin=1)

        data = await self.renderer.render("https://example.com/", QRFormat.PNG, options)

        self.assertTrue(data.startswith(PNG_SIGNATURE))

    async def test_svg_uses_colors(self):
        options = QRRenderOptions(foreground="#112233", background="#fafafa")

        data = await self.renderer.render("https://example.com/", QRFormat.SVG, options)
        text = data.decode("utf-8")

        self.assertIn("<svg", text)
        self.assertIn("#112233", text)

    def test_render_sync_is_deterministic(self):
        options = QRRenderOptions(ecc="H")

        first = self.renderer.render_sync("https://example.com/", QRFormat.SVG, options)
        second = self.renderer.render_sync("https://example.com/", QRFormat.SVG, options)

        self.assertEqual(first, second)


class TestQRCodeUnavailable(unittest.IsolatedAsyncioTestCase):

    async def test_raises_without_library(self):
        with patch.object(qrcode_renderer, "QRCODE_AVAILABLE", False):
            renderer = QRCodeRenderer()

            self.assertFalse(renderer.available)
            with self.assertRaises(DependencyUnavailableError):
                await renderer.render("https://example.com/", QRFormat.PNG, QRRenderOptions())


if __name__ == "__main__":
    unittest.main()
