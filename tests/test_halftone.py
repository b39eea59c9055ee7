import math

import pytest

from halftone_service.processing.halftone import (
    MIN_CELL_SIZE,
    SHAPES,
    apply_halftone,
    cell_position,
    cell_size,
    screen_angle,
    shape_test,
)
from halftone_service.processing.options import HalftoneOptions, Shape

from helpers import all_pixels, grey_buffer, ink_count


def _coverage(value: int, shape: Shape, size: int = 64) -> int:
    options = HalftoneOptions(frequency=10, angle=45, thickness=1, shape=shape)
    return ink_count(apply_halftone(grey_buffer(size, size, value), options))


def test_black_covers_more_than_white_for_round_marks() -> None:
    options = HalftoneOptions(frequency=10, thickness=1, shape=Shape.ROUND)
    black = ink_count(apply_halftone(grey_buffer(32, 32, 0), options))
    white = ink_count(apply_halftone(grey_buffer(32, 32, 255), options))
    assert black > white
    assert white == 0


@pytest.mark.parametrize("shape", list(Shape))
def test_coverage_grows_with_darkness(shape: Shape) -> None:
    assert _coverage(0, shape) > _coverage(128, shape) > _coverage(255, shape)


def test_every_shape_has_a_test() -> None:
    assert set(SHAPES) == set(Shape)


@pytest.mark.parametrize("shape", list(Shape))
def test_shapes_at_cell_centre(shape: Shape) -> None:
    inside = SHAPES[shape]
    assert inside(0.0, 0.0, 0.5)
    assert not inside(0.0, 0.0, 0.0)


@pytest.mark.parametrize(
    "shape, expected",
    [
        (Shape.LINE, True),
        (Shape.ROUND, False),
        (Shape.DIAMOND, False),
        (Shape.ELLIPSE, False),
        (Shape.SQUARE, False),
        (Shape.CROSS, False),
    ],
)
def test_shapes_at_cell_corner(shape: Shape, expected: bool) -> None:
    assert SHAPES[shape](0.45, 0.45, 1.0) is expected


def test_ellipse_is_wider_than_tall() -> None:
    inside = SHAPES[Shape.ELLIPSE]
    assert inside(0.6, 0.0, 0.9)
    assert not inside(0.0, 0.6, 0.9)


def test_cross_arms() -> None:
    inside = SHAPES[Shape.CROSS]
    assert inside(0.4, 0.0, 1.0)
    assert inside(0.0, 0.4, 1.0)
    assert not inside(0.2, 0.2, 1.0)


def test_unknown_shape_falls_back_to_line() -> None:
    assert shape_test("star") is SHAPES[Shape.LINE]
    assert shape_test("ROUND") is SHAPES[Shape.ROUND]


@pytest.mark.parametrize("angle, expected", [(0, 0.01), (90, 90.01), (180, 180.01), (45, 45), (90.5, 90.5)])
def test_axis_aligned_angles_are_nudged(angle, expected) -> None:
    assert screen_angle(angle) == pytest.approx(expected)


def test_cell_size_from_frequency() -> None:
    assert cell_size(10) == pytest.approx(7.2)
    assert cell_size(50) == MIN_CELL_SIZE
    assert cell_size(0.5) == pytest.approx(144)
    assert math.isfinite(cell_size(0))


def test_cell_position_is_centred_and_wraps() -> None:
    assert cell_position(0, 0, 1.0, 0.0, 4.0) == (-0.5, -0.5)
    assert cell_position(2, 1, 1.0, 0.0, 4.0) == (0.0, -0.25)
    assert cell_position(-1, 0, 1.0, 0.0, 4.0) == (0.25, -0.5)


def test_line_screen_rows_at_zero_degrees() -> None:
    # Cell size 8 with half-height lines; the 0.01° nudge shifts rows up slightly.
    options = HalftoneOptions(frequency=9, angle=0, thickness=0.5, shape=Shape.LINE)
    result = apply_halftone(grey_buffer(8, 8, 0), options)
    rows = [result.pixel(3, y)[0] for y in range(8)]
    assert rows == [255, 255, 255, 0, 0, 0, 0, 255]


def test_halftone_invert_and_transparency() -> None:
    options = HalftoneOptions(frequency=10, shape=Shape.ROUND, invert=True, transparent=True)
    result = apply_halftone(grey_buffer(8, 8, 255), options)
    assert set(all_pixels(result)) == {(0, 0, 0, 0)}


def test_halftone_honours_mask() -> None:
    mask = bytearray([0] * 8 + [200] * 56)
    options = HalftoneOptions(frequency=10, shape=Shape.ROUND, mask=mask)
    result = apply_halftone(grey_buffer(8, 8, 0), options)
    assert all(result.pixel(x, 0) == (0, 0, 0, 0) for x in range(8))
    assert all(pixel[3] == 200 for pixel in all_pixels(result)[8:])
