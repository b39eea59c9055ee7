from __future__ import annotations

import math
from typing import Callable, Dict

from .buffer import PixelBuffer
from .dither import prepare_output
from .options import HalftoneOptions, Shape, coerce_enum

REFERENCE_DPI = 72.0
MIN_CELL_SIZE = 2.0
MIN_FREQUENCY = 0.01
# Exact multiples of 90° line the screen up with the pixel grid and alias badly.
AXIS_NUDGE_DEGREES = 0.01

ShapeTest = Callable[[float, float, float], bool]


def _line(cx: float, cy: float, size: float) -> bool:
    return abs(cy) < size * 0.5


def _round(cx: float, cy: float, size: float) -> bool:
    return math.sqrt(cx * cx + cy * cy) < size * 0.5


def _diamond(cx: float, cy: float, size: float) -> bool:
    return abs(cx) + abs(cy) < size * 0.5


def _ellipse(cx: float, cy: float, size: float) -> bool:
    # Wider than tall.
    return math.sqrt(cx * cx / 0.5 + cy * cy / 0.2) < size


def _square(cx: float, cy: float, size: float) -> bool:
    return abs(cx) < size * 0.4 and abs(cy) < size * 0.4


def _cross(cx: float, cy: float, size: float) -> bool:
    arm_width = size * 0.15
    arm_length = size * 0.5
    return (abs(cx) < arm_width and abs(cy) < arm_length) or (
        abs(cy) < arm_width and abs(cx) < arm_length
    )


SHAPES: Dict[Shape, ShapeTest] = {
    Shape.LINE: _line,
    Shape.ROUND: _round,
    Shape.DIAMOND: _diamond,
    Shape.ELLIPSE: _ellipse,
    Shape.SQUARE: _square,
    Shape.CROSS: _cross,
}


def shape_test(shape: Shape | str) -> ShapeTest:
    return SHAPES[coerce_enum(Shape, shape, Shape.LINE, "shape")]


def screen_angle(angle: float) -> float:
    return angle + AXIS_NUDGE_DEGREES if angle % 90 == 0 else angle


def cell_size(frequency: float) -> float:
    return max(MIN_CELL_SIZE, REFERENCE_DPI / max(frequency, MIN_FREQUENCY))


def cell_position(x: int, y: int, cos: float, sin: float, size: float):
    """Rotate ``(x, y)`` into screen space and return its offset from the cell centre.

    Both components fall in ``[-0.5, 0.5)``.
    """

    rx = x * cos + y * sin
    ry = -x * sin + y * cos
    cell_x = ((math.fmod(rx, size) + size) % size) / size
    cell_y = ((math.fmod(ry, size) + size) % size) / size
    return cell_x - 0.5, cell_y - 0.5


def apply_halftone(buffer: PixelBuffer, options: HalftoneOptions = HalftoneOptions()) -> PixelBuffer:
    """Render a rotated halftone screen whose marks grow with darkness.

    Each pixel is placed in its screen cell, and the mark at that cell is
    ``(1 - brightness) * thickness`` across. Pixels inside the mark take the
    ink colour; the rest take the background.
    """

    ink, out = prepare_output(buffer, options)
    inside = shape_test(options.shape)
    radians = math.radians(screen_angle(options.angle))
    cos = math.cos(radians)
    sin = math.sin(radians)
    size = cell_size(options.frequency)
    thickness = options.thickness

    width = buffer.width
    src = buffer.data
    dst = out.data
    for y in range(buffer.height):
        for x in range(width):
            index = y * width + x
            if ink.is_masked(index):
                ink.paint(dst, index, True)
                continue
            mark = (1 - src[index * 4] / 255) * thickness
            cx, cy = cell_position(x, y, cos, sin, size)
            ink.paint(dst, index, not inside(cx, cy, mark))
    return out
