"""
Chainable image pipeline.

    ImageProcessor().read(upload).cover(128, 128).to_webp().optimize().save()

``save`` without a path returns the encoded bytes.
"""
import io
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from .exceptions import DecoderError, EncoderError, ProcessingError

logger = logging.getLogger(__name__)


class ImageProcessor:
    """Read an image, transform it and encode the result."""

    default_quality = 80

    def __init__(self):
        self.image: Optional[Image.Image] = None
        self.format: Optional[str] = None
        self.quality: Optional[int] = None

    def read(self, source) -> 'ImageProcessor':
        """Decode from a path, bytes or a file-like object."""
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        elif hasattr(source, 'seek'):
            source.seek(0)

        try:
            image = Image.open(source)
            image.load()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise DecoderError(f"Unable to read image: {e}") from e

        self.image = ImageOps.exif_transpose(image)
        self.format = image.format
        return self

    def cover(self, width: int, height: int) -> 'ImageProcessor':
        """Scale and crop to exactly ``width`` x ``height``, centred."""
        self._ensure_image()
        self.image = ImageOps.fit(self.image, (width, height), method=Image.Resampling.LANCZOS)
        return self

    def to_webp(self) -> 'ImageProcessor':
        self._ensure_image()
        self.format = 'WEBP'
        return self

    def optimize(self, quality: int = default_quality) -> 'ImageProcessor':
        self._ensure_image()
        self.quality = quality
        return self

    def save(self, path=None):
        """
        Encode the image.

        Writes to ``path`` (a filesystem path or writable file object) when
        given, otherwise returns the encoded bytes.
        """
        self._ensure_image()

        image_format = self.format or 'PNG'
        image = self.image
        if image_format == 'WEBP' and image.mode not in ('RGB', 'RGBA'):
            image = image.convert('RGBA' if 'A' in image.getbands() or 'transparency' in image.info else 'RGB')

        options = {'format': image_format}
        if self.quality is not None:
            options['quality'] = self.quality

        buffer = io.BytesIO() if path is None else None
        try:
            image.save(buffer if path is None else path, **options)
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Image encoding failed: {e}")
            raise EncoderError(f"Unable to encode image as {image_format}: {e}") from e

        if buffer is not None:
            return buffer.getvalue()
        return None

    @property
    def size(self):
        self._ensure_image()
        return self.image.size

    def _ensure_image(self):
        if self.image is None:
            raise ProcessingError("No image has been read.")
