"""Document enhancement: decode, downscale, filter and re-encode captured OTM photos."""

import io
import logging

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from shared.config import MAX_DOCUMENT_WIDTH, JPEG_QUALITY
from shared.exceptions import ImageDecodeError, PayloadError
from .document_filter import apply_document_filter
from .models import EnhancedDocument

logger = logging.getLogger(__name__)

# Single-channel modes wider than 8 bits; Image.convert clips these at 255
HIGH_BIT_MODES = ('I', 'F', 'I;16', 'I;16L', 'I;16B', 'I;16N')


def to_8bit(image: Image.Image) -> Image.Image:
    """
    Rescale a high bit depth grayscale image into 8-bit ``L``.

    16-bit modes map 0..65535 onto 0..255. ``I`` and ``F`` images are taken
    as 8-bit when they fit, as 16-bit when they fit that range, and are
    otherwise scaled by their own maximum.
    """
    if image.mode not in HIGH_BIT_MODES:
        return image

    pixels = np.asarray(image).astype(np.float64)
    if image.mode.startswith('I;16'):
        top = 65535.0
    else:
        peak = float(pixels.max()) if pixels.size else 0.0
        top = 255.0 if peak <= 255 else 65535.0 if peak <= 65535 else peak

    scaled = np.rint(np.clip(pixels, 0, top) * (255.0 / top))
    return Image.fromarray(scaled.astype(np.uint8))


class DocumentEnhancer:
    """Turns a photographed maintenance form into a clean, scanner-like image."""

    def __init__(self, max_width: int = MAX_DOCUMENT_WIDTH, quality: int = JPEG_QUALITY):
        self.max_width = max_width
        self.quality = quality

    def enhance(self, image_bytes: bytes) -> EnhancedDocument:
        """
        Enhance an encoded captured image.

        Args:
            image_bytes: Encoded image (JPEG, PNG, ...) from the camera or file picker

        Returns:
            EnhancedDocument with JPEG data at the configured quality

        Raises:
            ImageDecodeError: If the bytes are not a decodable image
        """
        image = self.decode(image_bytes)
        enhanced = self.enhance_image(image)

        buffer = io.BytesIO()
        enhanced.save(buffer, format='JPEG', quality=self.quality)

        logger.info(
            f"Enhanced document {image.width}x{image.height} -> "
            f"{enhanced.width}x{enhanced.height} ({buffer.tell()} bytes)"
        )
        return EnhancedDocument(
            width=enhanced.width,
            height=enhanced.height,
            data=buffer.getvalue()
        )

    def enhance_image(self, image: Image.Image) -> Image.Image:
        """Downscale and filter a decoded image. The input image is left untouched."""
        image = self.downscale(to_8bit(image).convert('RGB'))
        pixels = np.asarray(image)
        return Image.fromarray(apply_document_filter(pixels))

    def downscale(self, image: Image.Image) -> Image.Image:
        """Scale to ``max_width`` keeping the aspect ratio when the image is wider."""
        if image.width <= self.max_width:
            return image

        height = max(1, round(image.height * self.max_width / image.width))
        return image.resize((self.max_width, height), Image.Resampling.BILINEAR)

    def to_pdf(self, image_bytes: bytes) -> bytes:
        """
        Wrap an image in a single-page PDF sized to the image.

        Raises:
            PayloadError: If the image cannot be converted
        """
        try:
            image = to_8bit(self.decode(image_bytes)).convert('RGB')
            buffer = io.BytesIO()
            image.save(buffer, format='PDF', resolution=72.0)
            return buffer.getvalue()
        except (ImageDecodeError, OSError, ValueError) as e:
            logger.error(f"Error converting document to PDF: {e}")
            raise PayloadError(f"Failed to build PDF: {str(e)}")

    @staticmethod
    def decode(image_bytes: bytes) -> Image.Image:
        """Decode image bytes, applying the EXIF orientation phones record."""
        if not image_bytes:
            raise ImageDecodeError("Captured image is empty")

        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ImageDecodeError(f"Could not decode captured image: {str(e)}")

        return ImageOps.exif_transpose(image)
