"""
Image normalization for uploaded screenshots.

Screenshots are downscaled so the longest side fits the model's preferred
input size and re-encoded as WEBP to keep request bodies small.
"""
import base64
import io
from dataclasses import dataclass
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from exceptions import ResourceLimitError, UnreadableImageError

DEFAULT_MAX_DIMENSION = 1568
DEFAULT_QUALITY = 85
OUTPUT_FORMAT = "WEBP"
OUTPUT_MEDIA_TYPE = "image/webp"


@dataclass(frozen=True)
class NormalizedImage:
    """Encoded image ready to be sent to the model"""
    data: bytes
    media_type: str
    width: int
    height: int

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


def scaled_size(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    """Target size with the longest side capped at max_dimension; never upscales."""
    scale = min(1.0, max_dimension / max(width, height))
    return max(1, round(width * scale)), max(1, round(height * scale))


def normalize_image(
    data: bytes,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
    quality: int = DEFAULT_QUALITY
) -> NormalizedImage:
    """
    Decode, downscale and re-encode an uploaded image.

    Args:
        data: Raw uploaded bytes (any format Pillow can read)
        max_dimension: Upper bound for the longest side in pixels
        quality: Lossy compression quality, 1-100

    Returns:
        NormalizedImage with WEBP bytes and final dimensions

    Raises:
        UnreadableImageError: If the bytes are not a decodable image
        ResourceLimitError: If Pillow flags the image as a decompression bomb
    """
    try:
        with Image.open(io.BytesIO(data)) as source:
            source.load()
            image = source.copy()
    except Image.DecompressionBombError as e:
        raise ResourceLimitError(f"Image dimensions too large: {e}") from e
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise UnreadableImageError(f"Could not read image: {e}") from e

    if image.mode not in ("RGB", "RGBA"):
        has_alpha = image.mode in ("LA", "PA") or (
            image.mode == "P" and "transparency" in image.info
        )
        image = image.convert("RGBA" if has_alpha else "RGB")

    target = scaled_size(image.width, image.height, max_dimension)
    if target != image.size:
        image = image.resize(target, Image.LANCZOS)

    buffer = io.BytesIO()
    image.save(buffer, format=OUTPUT_FORMAT, quality=quality)

    return NormalizedImage(
        data=buffer.getvalue(),
        media_type=OUTPUT_MEDIA_TYPE,
        width=image.width,
        height=image.height
    )
