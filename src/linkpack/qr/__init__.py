"""QR render capability: the renderer contract and its qrcode-backed implementation."""

from linkpack.qr.base import QRRenderer
from linkpack.qr.qrcode_renderer import QRCODE_AVAILABLE, QRCodeRenderer


__all__ = [
    "QRRenderer",
    "QRCODE_AVAILABLE",
    "QRCodeRenderer",
]
