"""QR renderer backed by the qrcode library.

PNG images go through qrcode's Pillow image factory, SVG images through
its path-based SVG factory. Encoding is CPU-bound and runs in a worker
thread so concurrent renders do not block the event loop.
"""

import asyncio
import io
import logging

from linkpack.core.constants import QRFormat
from linkpack.core.exceptions import DependencyUnavailableError
from linkpack.core.models import QRRenderOptions
from linkpack.qr.base import QRRenderer

try:
    import qrcode
    import qrcode.constants
    from qrcode.image.svg import SvgPathImage
    QRCODE_AVAILABLE = True
except ImportError:
    QRCODE_AVAILABLE = False


logger = logging.getLogger(__name__)


def _error_correction(ecc: str) -> int:
    return {
        "L": qrcode.constants.ERROR_CORRECT_L,
        "M": qrcode.constants.ERROR_CORRECT_M,
        "Q": qrcode.constants.ERROR_CORRECT_Q,
        "H": qrcode.constants.ERROR_CORRECT_H,
    }.get(ecc, qrcode.constants.ERROR_CORRECT_M)


def _svg_factory(options: QRRenderOptions) -> type:
    """SVG path image class carrying the configured colors."""
    return type(
        "ColoredSvgPathImage",
        (SvgPathImage,),
        {
            "QR_PATH_STYLE": {**SvgPathImage.QR_PATH_STYLE, "fill": options.foreground},
            "background": None if options.transparent else options.background,
        },
    )


class QRCodeRenderer(QRRenderer):
    """Render QR images with qrcode (and Pillow for PNG)."""

    name = "qrcode"

    @property
    def available(self) -> bool:
        return QRCODE_AVAILABLE

    def _build(self, url: str, options: QRRenderOptions) -> "qrcode.QRCode":
        qr = qrcode.QRCode(
            version=None,
            error_correction=_error_correction(options.ecc),
            box_size=options.scale,
            border=options.margin,
        )
        qr.add_data(url)
        qr.make(fit=True)
        return qr

    def render_sync(self, url: str, fmt: QRFormat, options: QRRenderOptions) -> bytes:
        """Encode one URL in the calling thread."""
        if not QRCODE_AVAILABLE:
            raise DependencyUnavailableError(
                "qrcode is not installed. "
                "Install it with: pip install qrcode[pil]"
            )

        qr = self._build(url, options)
        buffer = io.BytesIO()

        if QRFormat(fmt) is QRFormat.SVG:
            img = qr.make_image(image_factory=_svg_factory(options))
            img.save(buffer)
        else:
            back_color = "transparent" if options.transparent else options.background
            img = qr.make_image(fill_color=options.foreground, back_color=back_color)
            img.save(buffer, format="PNG")

        return buffer.getvalue()

    async def render(self, url: str, fmt: QRFormat, options: QRRenderOptions) -> bytes:
        try:
            return await asyncio.to_thread(self.render_sync, url, fmt, options)
        except DependencyUnavailableError:
            raise
        except Exception as e:
            logger.error(f"QR render failed for {url}: {e}")
            raise DependencyUnavailableError(f"QR generation failed: {e}") from e
