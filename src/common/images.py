"""Image normalization: resize and recompress an upload to fit a size budget."""

import io
import os
from dataclasses import dataclass
from typing import Sequence

from PIL import Image, ImageOps, UnidentifiedImageError

from common.base.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_BYTES = 1024 * 1024
DEFAULT_MAX_DIMENSION = 1200
DEFAULT_QUALITIES = (80, 60, 40)

OUTPUT_FORMAT = 'JPEG'
OUTPUT_MIMETYPE = 'image/jpeg'
OUTPUT_EXTENSION = '.jpg'

class ImageNormalizationError(Exception):
    """Raised when an image cannot be decoded or re-encoded."""
    pass

@dataclass
class NormalizedImage:
    """Result of normalize_image().

    ``oversized`` is set when even the lowest quality did not fit the budget;
    ``data`` then holds the most compressed attempt.
    """
    data: bytes
    width: int
    height: int
    quality: int
    oversized: bool
    mimetype: str = OUTPUT_MIMETYPE

    @property
    def size(self) -> int:
        return len(self.data)

def normalized_filename(filename: str) -> str:
    """Swap a filename's extension for the normalized output's."""
    stem, _ = os.path.splitext(os.path.basename(filename or ''))
    return (stem or 'image') + OUTPUT_EXTENSION

def _flatten(img: Image.Image) -> Image.Image:
    """Convert to RGB, compositing any transparency onto white."""
    has_alpha = img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info)
    if has_alpha:
        rgba = img.convert('RGBA')
        background = Image.new('RGB', rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel('A'))
        return background
    if img.mode != 'RGB':
        return img.convert('RGB')
    return img

def normalize_image(
    data: bytes,
    max_bytes: int = DEFAULT_MAX_BYTES,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
    qualities: Sequence[int] = DEFAULT_QUALITIES
) -> NormalizedImage:
    """
    Resize and re-encode an image as JPEG until it fits max_bytes.

    The long edge is constrained to max_dimension with the aspect ratio kept;
    smaller images are not upscaled. Qualities are tried in order and the
    first encoding under the budget wins.

    :param data: Raw bytes of the source image, any format Pillow reads
    :param max_bytes: Size budget for the output
    :param max_dimension: Maximum length of the long edge in pixels
    :param qualities: JPEG qualities to try, highest first
    :return: NormalizedImage, with oversized=True if the budget was not met
    :raises: ImageNormalizationError if decoding or encoding fails
    """
    if not data:
        raise ImageNormalizationError("Image is empty")
    if not qualities:
        raise ValueError("At least one quality level is required")

    try:
        with Image.open(io.BytesIO(data)) as source:
            source.load()
            img = ImageOps.exif_transpose(source)
            img = _flatten(img)
            img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

            encoded = b''
            quality = qualities[0]
            for quality in qualities:
                buffer = io.BytesIO()
                img.save(buffer, OUTPUT_FORMAT, quality=quality, optimize=True)
                encoded = buffer.getvalue()
                if len(encoded) <= max_bytes:
                    break
            width, height = img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageNormalizationError(f"Could not normalize image: {e}") from e

    oversized = len(encoded) > max_bytes
    if oversized:
        logger.warning(f"Image still {len(encoded)} bytes at quality {quality}, budget is {max_bytes}")
    else:
        logger.debug(f"Normalized image to {width}x{height}, {len(encoded)} bytes at quality {quality}")

    return NormalizedImage(
        data=encoded,
        width=width,
        height=height,
        quality=quality,
        oversized=oversized
    )
