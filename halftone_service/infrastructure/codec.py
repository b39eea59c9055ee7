from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from ..config import SETTINGS
from ..processing.buffer import InvalidDimensions, PixelBuffer


def decode_image(data: bytes, max_pixels: int | None = None) -> PixelBuffer:
    """Decode PNG/JPEG/... bytes into an RGBA :class:`PixelBuffer`.

    Anything that cannot be decoded, or that has more than ``max_pixels``
    pixels, raises :class:`InvalidDimensions` before a buffer is allocated.
    """

    limit = SETTINGS.max_pixels if max_pixels is None else max_pixels
    if not data:
        raise InvalidDimensions("Empty image data")
    try:
        img = Image.open(io.BytesIO(data))
        width, height = img.size
        if width * height > limit:
            raise InvalidDimensions(f"Image {width}x{height} exceeds {limit} pixels")
        return PixelBuffer.from_image(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise InvalidDimensions(f"Unreadable image: {exc}") from exc


def encode_png(buffer: PixelBuffer) -> bytes:
    out = io.BytesIO()
    buffer.to_image().save(out, "PNG", optimize=True)
    return out.getvalue()
