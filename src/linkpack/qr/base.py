"""QR render capability contract.

The archive assembler never encodes QR codes itself; it calls a QRRenderer.
Implementations must be side-effect free besides producing bytes, so one
renderer can serve concurrent renders.
"""

from abc import ABC, abstractmethod

from linkpack.core.constants import QRFormat
from linkpack.core.models import QRRenderOptions


class QRRenderer(ABC):
    """Abstract base class for QR render capabilities.

    Attributes:
        name: Renderer identifier (e.g., "qrcode")
    """

    name: str

    @property
    @abstractmethod
    def available(self) -> bool:
        """Whether the renderer can produce images in this environment."""
        pass

    @abstractmethod
    async def render(
        self,
        url: str,
        fmt: QRFormat,
        options: QRRenderOptions,
    ) -> bytes:
        """Encode one URL as a QR image.

        Args:
            url: Safe, canonical http(s) URL
            fmt: Image format to produce
            options: Size, margin, error correction and colors

        Returns:
            Encoded image bytes

        Raises:
            DependencyUnavailableError: If the renderer cannot produce the image
        """
        pass
