from __future__ import annotations

from array import array

from .buffer import Mask, PixelBuffer, check_mask
from .options import BinarizeOptions

BAYER_4X4 = (
    (0, 8, 2, 10),
    (12, 4, 14, 6),
    (3, 11, 1, 9),
    (15, 7, 13, 5),
)

# Floyd–Steinberg neighbours as (dx, dy, weight in sixteenths), in diffusion order.
FLOYD_STEINBERG = (
    (1, 0, 7),
    (-1, 1, 3),
    (0, 1, 5),
    (1, 1, 1),
)


class Ink:
    """Resolves output colours for a binarizer run and writes pixels.

    Every binarizer decides only whether a pixel is light or dark; ``paint``
    applies the shared colour, transparency and mask rules.
    """

    __slots__ = ("bg_color", "fg_color", "bg_alpha", "mask")

    def __init__(self, options: BinarizeOptions) -> None:
        self.bg_color = 0 if options.invert else 255
        self.fg_color = 255 if options.invert else 0
        self.bg_alpha = 0 if options.transparent else 255
        self.mask: Mask = options.mask

    def is_masked(self, index: int) -> bool:
        return self.mask is not None and self.mask[index] == 0

    def paint(self, dst: bytearray, index: int, light: bool) -> None:
        offset = index * 4
        mask = self.mask
        if mask is not None:
            mask_alpha = mask[index]
            if mask_alpha == 0:
                dst[offset] = dst[offset + 1] = dst[offset + 2] = dst[offset + 3] = 0
                return
            alpha = mask_alpha
        else:
            alpha = self.bg_alpha if light else 255
        color = self.bg_color if light else self.fg_color
        dst[offset] = dst[offset + 1] = dst[offset + 2] = color
        dst[offset + 3] = alpha


def prepare_output(buffer: PixelBuffer, options: BinarizeOptions):
    check_mask(buffer, options.mask)
    return Ink(options), PixelBuffer.blank(buffer.width, buffer.height)


def apply_threshold(buffer: PixelBuffer, options: BinarizeOptions = BinarizeOptions()) -> PixelBuffer:
    """50% threshold: grey above 127 is background, everything else is ink."""
    ink, out = prepare_output(buffer, options)
    src = buffer.data
    dst = out.data
    for index in range(buffer.pixel_count):
        ink.paint(dst, index, src[index * 4] > 127)
    return out


def apply_pattern_dither(buffer: PixelBuffer, options: BinarizeOptions = BinarizeOptions()) -> PixelBuffer:
    """Ordered dither against a tiled 4x4 Bayer matrix."""
    ink, out = prepare_output(buffer, options)
    thresholds = [[(value + 0.5) / 16 for value in row] for row in BAYER_4X4]
    width = buffer.width
    src = buffer.data
    dst = out.data
    for y in range(buffer.height):
        row = thresholds[y % 4]
        for x in range(width):
            index = y * width + x
            ink.paint(dst, index, src[index * 4] / 255 > row[x % 4])
    return out


def diffuse(levels: array, width: int, height: int, mask: Mask = None) -> float:
    """Quantize ``levels`` (0..1, row-major) to 0/1 in place with Floyd–Steinberg.

    Masked-out pixels are skipped entirely and never receive error. Returns
    the quantization error that could not be passed on because its neighbour
    was outside the buffer or masked out.
    """

    lost = 0.0
    for y in range(height):
        for x in range(width):
            index = y * width + x
            if mask is not None and mask[index] == 0:
                continue
            old = levels[index]
            new = 1.0 if old > 0.5 else 0.0
            levels[index] = new
            error = old - new
            for dx, dy, weight in FLOYD_STEINBERG:
                nx = x + dx
                ny = y + dy
                if nx < 0 or nx >= width or ny >= height:
                    lost += error * weight / 16
                    continue
                neighbour = ny * width + nx
                if mask is not None and mask[neighbour] == 0:
                    lost += error * weight / 16
                    continue
                levels[neighbour] += error * weight / 16
    return lost


def apply_diffusion_dither(buffer: PixelBuffer, options: BinarizeOptions = BinarizeOptions()) -> PixelBuffer:
    """Floyd–Steinberg error diffusion in a single row-major raster pass.

    Masked-out pixels keep the background out of the dither, so the
    foreground is dithered as if the background were not there.
    """

    ink, out = prepare_output(buffer, options)
    src = buffer.data
    levels = array("f", (src[index * 4] / 255 for index in range(buffer.pixel_count)))
    diffuse(levels, buffer.width, buffer.height, options.mask)

    dst = out.data
    for index in range(buffer.pixel_count):
        ink.paint(dst, index, levels[index] > 0.5)
    return out
