from __future__ import annotations

import math
from typing import Tuple

from .buffer import PixelBuffer
from .options import SamplePosition, coerce_enum

SAMPLE_INSET = 5

RGB = Tuple[int, int, int]


def _inset(extent: int) -> int:
    # Small images cannot fit the full inset; keep sampling inside the buffer.
    return min(SAMPLE_INSET, (extent - 1) // 2)


def _corner_points(width: int, height: int):
    dx = _inset(width)
    dy = _inset(height)
    return {
        SamplePosition.TOPLEFT: (dx, dy),
        SamplePosition.TOPRIGHT: (width - dx - 1, dy),
        SamplePosition.BOTTOMLEFT: (dx, height - dy - 1),
        SamplePosition.BOTTOMRIGHT: (width - dx - 1, height - dy - 1),
    }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def sample_background(buffer: PixelBuffer, position: SamplePosition | str) -> RGB:
    """Return the reference background colour for ``position``.

    ``corners`` averages the four inset corners; any other position samples
    that corner directly.
    """

    position = coerce_enum(SamplePosition, position, SamplePosition.CORNERS, "bg_sample_position")
    points = _corner_points(buffer.width, buffer.height)
    if position is SamplePosition.CORNERS:
        samples = [buffer.pixel(x, y)[:3] for x, y in points.values()]
        return (
            _round_half_up(sum(sample[0] for sample in samples) / 4),
            _round_half_up(sum(sample[1] for sample in samples) / 4),
            _round_half_up(sum(sample[2] for sample in samples) / 4),
        )
    x, y = points[position]
    r, g, b, _ = buffer.pixel(x, y)
    return r, g, b


def key_alpha(dist_squared: float, tolerance_squared: float, softness: float) -> int:
    """Alpha for a pixel whose squared RGB distance from the reference is ``dist_squared``."""
    if dist_squared >= tolerance_squared:
        return 255
    if softness <= 0:
        return 0
    dist = math.sqrt(dist_squared)
    max_dist = math.sqrt(tolerance_squared)
    soft_range = max_dist * (softness / 5)
    inner = max_dist - soft_range
    if dist < inner:
        return 0
    return _round_half_up((dist - inner) / soft_range * 255)


def remove_background(
    buffer: PixelBuffer,
    position: SamplePosition | str = SamplePosition.CORNERS,
    tolerance: float = 30,
    softness: float = 1,
) -> PixelBuffer:
    """Return a copy of ``buffer`` whose alpha marks how far each pixel is from the background.

    Pixels within ``tolerance`` (1-100, scaled to RGB distance) of the sampled
    reference colour become transparent. ``softness`` (0-5) widens a linear
    ramp at the outer edge of that range instead of a hard cut.
    """

    bg_r, bg_g, bg_b = sample_background(buffer, position)
    tolerance_squared = (tolerance * 2.55) * (tolerance * 2.55) * 3
    src = buffer.data
    out = bytearray(src)
    for offset in range(0, len(src), 4):
        dr = src[offset] - bg_r
        dg = src[offset + 1] - bg_g
        db = src[offset + 2] - bg_b
        out[offset + 3] = key_alpha(dr * dr + dg * dg + db * db, tolerance_squared, softness)
    return PixelBuffer(buffer.width, buffer.height, out)


def build_background_mask(
    buffer: PixelBuffer,
    position: SamplePosition | str = SamplePosition.CORNERS,
    tolerance: float = 30,
    softness: float = 1,
) -> Tuple[PixelBuffer, bytearray]:
    keyed = remove_background(buffer, position, tolerance, softness)
    return keyed, keyed.alpha_mask()
