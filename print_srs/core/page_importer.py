"""
PageImporter - Turn worksheet photos into stored page images

Pattern: Image processing with Pillow, display decoding with Qt
"""

import io
import logging
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageOps
from PyQt6.QtGui import QImage

from ..config import Config
from ..models.records import Mask, Page


logger = logging.getLogger(__name__)


class ImageDecodeError(Exception):
    """Raised when a photo or stored page cannot be decoded."""
    pass


class PageImporter:
    """
    Converts photos into the JPEG pages kept in the database.

    Features:
    - Applies EXIF orientation so phone photos are upright
    - Downscales to a maximum width
    - Re-encodes as JPEG
    - Renders a page with its masks blacked out

    Usage:
        importer = PageImporter()
        jpeg_bytes, width, height = importer.import_image(Path('worksheet.jpg'))
        qimage = importer.load_image(jpeg_bytes)
    """

    def __init__(self, max_width: Optional[int] = None, jpeg_quality: Optional[int] = None):
        self.max_width = max_width or Config.IMPORT_MAX_WIDTH
        self.jpeg_quality = jpeg_quality or Config.IMPORT_JPEG_QUALITY

    def import_image(self, source: Union[Path, str, bytes]) -> Tuple[bytes, int, int]:
        """
        Decode, orient, downscale and JPEG-encode a photo

        Args:
            source: Image file path or raw encoded bytes

        Returns:
            Tuple of (jpeg_bytes, width, height)

        Raises:
            ImageDecodeError: If the source is not a readable image
        """
        try:
            if isinstance(source, (bytes, bytearray)):
                image = Image.open(io.BytesIO(source))
            else:
                image = Image.open(Path(source))
            image.load()
        except (OSError, ValueError) as e:
            raise ImageDecodeError(f"Cannot read image: {e}") from e

        image = ImageOps.exif_transpose(image)
        if image.mode != 'RGB':
            image = image.convert('RGB')

        if image.width > self.max_width:
            scale = self.max_width / image.width
            new_size = (self.max_width, max(1, round(image.height * scale)))
            image = image.resize(new_size, Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        image.save(buffer, 'JPEG', quality=self.jpeg_quality)
        logger.debug(f"Imported page {image.width}x{image.height} ({buffer.tell()} bytes)")
        return buffer.getvalue(), image.width, image.height

    def load_image(self, blob: bytes) -> QImage:
        """
        Decode a stored page for display

        Args:
            blob: Encoded image bytes

        Returns:
            QImage of the page

        Raises:
            ImageDecodeError: If Qt cannot decode the bytes
        """
        image = QImage()
        if not blob or not image.loadFromData(blob):
            raise ImageDecodeError("Stored page image could not be decoded")
        return image

    def render_masked_page(self, page: Page, masks: Iterable[Mask]) -> bytes:
        """
        Render a page with every mask filled black

        Args:
            page: Page to render
            masks: Masks of the page's print

        Returns:
            PNG bytes
        """
        try:
            image = Image.open(io.BytesIO(page.image)).convert('RGB')
        except (OSError, ValueError) as e:
            raise ImageDecodeError(f"Cannot read page image: {e}") from e

        draw = ImageDraw.Draw(image)
        for mask in masks:
            x0 = mask.x * image.width
            y0 = mask.y * image.height
            x1 = (mask.x + mask.w) * image.width
            y1 = (mask.y + mask.h) * image.height
            draw.rectangle([x0, y0, x1, y1], fill=(0, 0, 0))

        buffer = io.BytesIO()
        image.save(buffer, 'PNG', optimize=True)
        return buffer.getvalue()


__all__ = ['PageImporter', 'ImageDecodeError']
