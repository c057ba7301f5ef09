"""
Image handling for Guess The Child

Decodes uploaded photos, builds preview thumbnails for the browser and
encodes photos into inline payloads for the captioning service.
"""

import io
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes]


class ImageDecodeError(ValueError):
    """Raised when an uploaded file is not a readable PNG/JPEG/WebP image."""


class ImageProcessor:
    """Handles photo decoding, previews and payload encoding."""

    # Supported file extensions
    IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.webp'}

    # Pillow format name -> mime type sent to the captioning service
    MIME_TYPES = {
        'PNG': 'image/png',
        'JPEG': 'image/jpeg',
        'WEBP': 'image/webp',
    }

    DEFAULT_PREVIEW_SIZE = (512, 512)

    def __init__(self, preview_size: Tuple[int, int] = DEFAULT_PREVIEW_SIZE):
        self.preview_size = tuple(preview_size)

    @classmethod
    def is_supported(cls, file_path: Union[str, Path]) -> bool:
        """Check the file extension against the accepted image formats."""
        return Path(file_path).suffix.lower() in cls.IMAGE_EXTENSIONS

    @staticmethod
    def read_bytes(source: ImageSource) -> bytes:
        """Read raw bytes from a path or pass bytes through.

        Args:
            source: File path or raw bytes

        Returns:
            bytes: File contents

        Raises:
            ImageDecodeError: If the file cannot be read
        """
        if isinstance(source, (bytes, bytearray)):
            return bytes(source)

        try:
            return Path(source).read_bytes()
        except OSError as e:
            raise ImageDecodeError(f"Cannot read {source}: {e}") from e

    @classmethod
    def detect_mime_type(cls, data: bytes) -> str:
        """Identify the image format of raw bytes.

        Args:
            data: Raw image bytes

        Returns:
            str: Mime type such as 'image/png'

        Raises:
            ImageDecodeError: If the bytes are not a supported image
        """
        if not data:
            raise ImageDecodeError("Image is empty")

        try:
            with Image.open(io.BytesIO(data)) as img:
                img.verify()
                image_format = img.format
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
            raise ImageDecodeError(f"Not a readable image: {e}") from e

        mime_type = cls.MIME_TYPES.get(image_format or "")
        if mime_type is None:
            raise ImageDecodeError(f"Unsupported image format: {image_format}")
        return mime_type

    def create_preview(self, data: bytes) -> Image.Image:
        """Create an RGB preview thumbnail from raw image bytes.

        Args:
            data: Raw image bytes

        Returns:
            PIL.Image: Thumbnail no larger than preview_size
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                # Flatten transparency onto white so previews render the same everywhere
                if img.mode in ('RGBA', 'LA', 'P'):
                    if img.mode == 'P':
                        img = img.convert('RGBA')
                    background = Image.new('RGB', img.size, (255, 255, 255))
                    background.paste(img, mask=img.split()[-1])
                    preview = background
                elif img.mode != 'RGB':
                    preview = img.convert('RGB')
                else:
                    preview = img.copy()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ImageDecodeError(f"Failed to build preview: {e}") from e

        preview.thumbnail(self.preview_size, Image.Resampling.LANCZOS)
        return preview

    def decode(self, source: ImageSource) -> Tuple[bytes, str, Image.Image]:
        """Decode an upload into (bytes, mime type, preview)."""
        data = self.read_bytes(source)
        mime_type = self.detect_mime_type(data)
        preview = self.create_preview(data)
        logger.debug(f"Decoded {mime_type} image ({len(data)} bytes), preview {preview.size}")
        return data, mime_type, preview

    @classmethod
    def to_inline_payload(cls, data: bytes, mime_type: Optional[str] = None) -> Tuple[bytes, str]:
        """Validate a stored photo and return it as (bytes, mime type) for a request.

        The mime type is always re-detected from the bytes, so a corrupt
        payload fails here rather than at the remote service.
        """
        detected = cls.detect_mime_type(data)
        if mime_type and mime_type != detected:
            logger.warning(f"Stored mime type {mime_type} does not match detected {detected}")
        return data, detected

