import pytest

from halftone_service.processing.buffer import PixelBuffer
from helpers import buffer_from_pixels


@pytest.fixture
def gradient() -> PixelBuffer:
    width, height = 16, 8
    pixels = []
    for y in range(height):
        for x in range(width):
            value = (x * 16 + y * 3) % 256
            pixels.append((value, value, value, 255))
    return buffer_from_pixels(width, height, pixels)


@pytest.fixture
def colourful() -> PixelBuffer:
    width, height = 7, 5
    pixels = []
    for y in range(height):
        for x in range(width):
            pixels.append(((x * 37) % 256, (y * 53) % 256, (x * y * 29) % 256, 200 + x))
    return buffer_from_pixels(width, height, pixels)
