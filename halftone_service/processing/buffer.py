from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from PIL import Image


Mask = Optional[bytearray]


class InvalidDimensions(ValueError):
    """Raised when a buffer's size does not match its declared width and height."""


@dataclass
class PixelBuffer:
    """A ``width`` x ``height`` grid of RGBA samples stored row-major.

    Every processing stage reads one buffer and hands back a buffer of the
    same size. ``data`` always holds exactly ``width * height * 4`` bytes.
    """

    width: int
    height: int
    data: bytearray = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)
        self.validate()

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidDimensions(f"Invalid dimensions {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise InvalidDimensions(
                f"Buffer holds {len(self.data)} bytes, expected {expected} for {self.width}x{self.height}"
            )

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        if width <= 0 or height <= 0:
            raise InvalidDimensions(f"Invalid dimensions {width}x{height}")
        return cls(width, height, bytearray(width * height * 4))

    @classmethod
    def filled(cls, width: int, height: int, rgba: Tuple[int, int, int, int]) -> "PixelBuffer":
        if width <= 0 or height <= 0:
            raise InvalidDimensions(f"Invalid dimensions {width}x{height}")
        return cls(width, height, bytearray(bytes(rgba) * (width * height)))

    @classmethod
    def from_image(cls, img: Image.Image) -> "PixelBuffer":
        rgba = img.convert("RGBA")
        width, height = rgba.size
        return cls(width, height, bytearray(rgba.tobytes()))

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), bytes(self.data))

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, bytearray(self.data))

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        offset = (y * self.width + x) * 4
        r, g, b, a = self.data[offset : offset + 4]
        return r, g, b, a

    def alpha_mask(self) -> bytearray:
        return self.data[3::4]


def check_mask(buffer: PixelBuffer, mask: Mask) -> None:
    if mask is not None and len(mask) != buffer.pixel_count:
        raise InvalidDimensions(
            f"Mask holds {len(mask)} entries, expected {buffer.pixel_count}"
        )
