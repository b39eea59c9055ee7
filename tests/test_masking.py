import math

import pytest

from halftone_service.processing.buffer import PixelBuffer
from halftone_service.processing.masking import (
    build_background_mask,
    key_alpha,
    remove_background,
    sample_background,
)
from halftone_service.processing.options import SamplePosition

from helpers import all_pixels, buffer_from_pixels


def _with_pixels(width, height, fill, overrides):
    buffer = PixelBuffer.filled(width, height, fill)
    for (x, y), rgba in overrides.items():
        offset = (y * width + x) * 4
        buffer.data[offset : offset + 4] = bytes(rgba)
    return buffer


def test_corners_average_inset_samples() -> None:
    buffer = _with_pixels(
        20,
        20,
        (255, 255, 255, 255),
        {
            (5, 5): (100, 0, 0, 255),
            (14, 5): (0, 100, 0, 255),
            (5, 14): (0, 0, 100, 255),
            (14, 14): (2, 2, 2, 255),
        },
    )
    assert sample_background(buffer, SamplePosition.CORNERS) == (26, 26, 26)


@pytest.mark.parametrize(
    "position, point",
    [
        ("topleft", (5, 5)),
        ("topright", (14, 5)),
        ("bottomleft", (5, 14)),
        ("bottomright", (14, 14)),
    ],
)
def test_single_corner_sampling(position, point) -> None:
    buffer = _with_pixels(20, 20, (0, 0, 0, 255), {point: (1, 2, 3, 255)})
    assert sample_background(buffer, position) == (1, 2, 3)


def test_small_images_sample_inside_bounds() -> None:
    buffer = buffer_from_pixels(
        2, 2, [(1, 1, 1, 255), (2, 2, 2, 255), (3, 3, 3, 255), (4, 4, 4, 255)]
    )
    assert sample_background(buffer, "topleft") == (1, 1, 1)
    assert sample_background(buffer, "bottomright") == (4, 4, 4)


def test_unknown_position_falls_back_to_corners() -> None:
    buffer = PixelBuffer.filled(12, 12, (40, 50, 60, 255))
    assert sample_background(buffer, "middle") == (40, 50, 60)


def test_reference_colour_becomes_transparent() -> None:
    buffer = PixelBuffer.filled(12, 12, (10, 20, 30, 255))
    keyed = remove_background(buffer, "corners", tolerance=1, softness=0)
    assert set(keyed.alpha_mask()) == {0}


def test_pixels_beyond_tolerance_stay_opaque() -> None:
    tolerance = 10
    # Just past tolerance * 2.55 * sqrt(3) from black.
    assert 26 * math.sqrt(3) >= tolerance * 2.55 * math.sqrt(3)
    buffer = _with_pixels(12, 12, (0, 0, 0, 255), {(0, 0): (26, 26, 26, 255)})
    keyed = remove_background(buffer, "topleft", tolerance=tolerance, softness=3)
    assert keyed.pixel(0, 0) == (26, 26, 26, 255)
    assert keyed.pixel(5, 5)[3] == 0


def test_softness_ramps_alpha_linearly() -> None:
    tolerance_squared = (10 * 2.55) ** 2 * 3
    assert key_alpha(0, tolerance_squared, 5) == 0
    assert key_alpha(3 * 13 * 13, tolerance_squared, 5) == 130
    assert key_alpha(tolerance_squared, tolerance_squared, 5) == 255


def test_softness_keeps_hard_core() -> None:
    tolerance_squared = (10 * 2.55) ** 2 * 3
    # With softness 1 only the outer fifth of the range ramps.
    assert key_alpha(3 * 13 * 13, tolerance_squared, 1) == 0
    assert 0 < key_alpha(3 * 23 * 23, tolerance_squared, 1) < 255


def test_remove_background_returns_fresh_buffer(colourful: PixelBuffer) -> None:
    before = bytes(colourful.data)
    keyed, mask = build_background_mask(colourful, "corners", 40, 2)
    assert bytes(colourful.data) == before
    assert keyed.data is not colourful.data
    assert mask == keyed.alpha_mask()
    for original, result in zip(all_pixels(colourful), all_pixels(keyed)):
        assert original[:3] == result[:3]


def test_black_corner_keys_only_itself() -> None:
    buffer = buffer_from_pixels(
        2,
        2,
        [(0, 0, 0, 255), (255, 255, 255, 255), (255, 255, 255, 255), (255, 255, 255, 255)],
    )
    _, mask = build_background_mask(buffer, "topleft", tolerance=10, softness=0)
    assert list(mask) == [0, 255, 255, 255]
