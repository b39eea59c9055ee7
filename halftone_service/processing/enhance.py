from __future__ import annotations

from typing import List

from .buffer import PixelBuffer

MAX_CONTRAST_FACTOR = 1000.0


def to_greyscale(buffer: PixelBuffer) -> PixelBuffer:
    """Replace R, G and B with rec.601 luminosity. Mutates ``buffer`` in place."""
    data = buffer.data
    for offset in range(0, len(data), 4):
        grey = round(data[offset] * 0.299 + data[offset + 1] * 0.587 + data[offset + 2] * 0.114)
        data[offset] = data[offset + 1] = data[offset + 2] = grey
    return buffer


def contrast_factor(contrast: float) -> float:
    """The 255-level contrast curve factor for a contrast delta in [-0.5, 1.0].

    Deltas past ~1.0157 would push the denominator to zero or below, so the
    factor is capped at ``MAX_CONTRAST_FACTOR``.
    """

    denominator = 255 * (259 - contrast * 255)
    if denominator <= 0:
        return MAX_CONTRAST_FACTOR
    factor = (259 * (contrast * 255 + 255)) / denominator
    return max(0.0, min(MAX_CONTRAST_FACTOR, factor))


def levels_table(contrast: float, brightness: float) -> List[int]:
    factor = contrast_factor(contrast)
    return [
        round(min(255.0, max(0.0, factor * (value - 128) + 128 + brightness)))
        for value in range(256)
    ]


def adjust_levels(buffer: PixelBuffer, contrast: float, brightness: float) -> PixelBuffer:
    """Apply contrast (as a delta from neutral) and brightness to R, G and B.

    Alpha is left alone. Mutates ``buffer`` in place.
    """

    lut = levels_table(contrast, brightness)
    adjusted = buffer.to_image().point(lut * 3 + list(range(256)))
    buffer.data[:] = adjusted.tobytes()
    return buffer
