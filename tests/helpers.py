from typing import Iterable, List, Tuple

from halftone_service.processing.buffer import PixelBuffer

Pixel = Tuple[int, int, int, int]


def grey_buffer(width: int, height: int, value: int) -> PixelBuffer:
    return PixelBuffer.filled(width, height, (value, value, value, 255))


def buffer_from_pixels(width: int, height: int, pixels: Iterable[Pixel]) -> PixelBuffer:
    data = bytearray()
    for pixel in pixels:
        data.extend(pixel)
    return PixelBuffer(width, height, data)


def all_pixels(buffer: PixelBuffer) -> List[Pixel]:
    return [buffer.pixel(x, y) for y in range(buffer.height) for x in range(buffer.width)]


def ink_count(buffer: PixelBuffer, ink: int = 0) -> int:
    return sum(1 for pixel in all_pixels(buffer) if pixel[0] == ink and pixel[3] != 0)
