from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional, Tuple

from PIL import Image

from .buffer import Mask, PixelBuffer
from .dither import apply_diffusion_dither, apply_pattern_dither, apply_threshold
from .enhance import adjust_levels, to_greyscale
from .halftone import apply_halftone
from .masking import build_background_mask
from .options import (
    HalftoneOptions,
    HalftoneSettings,
    Method,
    View,
    coerce_enum,
    options_from_settings,
)

LOGGER = logging.getLogger(__name__)

EXPORT_SCALES = (1, 2, 3, 4)

Binarizer = Callable[[PixelBuffer, HalftoneOptions], PixelBuffer]

BINARIZERS: Dict[Method, Binarizer] = {
    Method.HALFTONE: apply_halftone,
    Method.THRESHOLD: apply_threshold,
    Method.PATTERN: apply_pattern_dither,
    Method.DIFFUSION: apply_diffusion_dither,
}


def prepare_greyscale(
    source: PixelBuffer, settings: HalftoneSettings
) -> Tuple[PixelBuffer, Mask]:
    """Key out the background (if enabled) and reduce to adjusted greyscale.

    Background keying runs first so the colour distance is measured on the
    original colours. ``source`` is never modified.
    """

    mask: Mask = None
    if settings.remove_bg:
        working, mask = build_background_mask(
            source,
            settings.bg_sample_position,
            settings.bg_tolerance,
            settings.bg_softness,
        )
    else:
        working = source.copy()
    to_greyscale(working)
    adjust_levels(working, settings.contrast - 1, settings.brightness)
    return working, mask


def binarize(grey: PixelBuffer, settings: HalftoneSettings, mask: Mask = None, frequency_scale: int = 1) -> PixelBuffer:
    method = coerce_enum(Method, settings.method, Method.HALFTONE, "method")
    options = options_from_settings(settings, mask=mask, frequency_scale=frequency_scale)
    return BINARIZERS[method](grey, options)


def run_pipeline(
    source: PixelBuffer,
    settings: Optional[HalftoneSettings] = None,
    *,
    frequency_scale: int = 1,
) -> PixelBuffer:
    """Turn ``source`` into a stylized 1-bit buffer of the same size.

    ``frequency_scale`` divides the halftone frequency so an upscaled render
    keeps the same physical screen spacing as the preview.
    """

    source.validate()
    settings = (settings or HalftoneSettings()).clamped()
    started = time.perf_counter()
    grey, mask = prepare_greyscale(source, settings)
    out = binarize(grey, settings, mask=mask, frequency_scale=frequency_scale)
    LOGGER.debug(
        "Processed %dx%d with %s in %.1f ms",
        source.width,
        source.height,
        settings.method.value,
        (time.perf_counter() - started) * 1000,
    )
    return out


def render_view(
    source: PixelBuffer,
    settings: Optional[HalftoneSettings] = None,
    view: View | str = View.HALFTONE,
) -> PixelBuffer:
    view = coerce_enum(View, view, View.HALFTONE, "view")
    if view is View.ORIGINAL:
        return source.copy()
    settings = (settings or HalftoneSettings()).clamped()
    if view is View.GREYSCALE:
        grey, _ = prepare_greyscale(source, settings)
        return grey
    return run_pipeline(source, settings)


def check_scale(scale) -> int:
    try:
        value = int(str(scale).strip())
    except ValueError:
        value = None
    if value not in EXPORT_SCALES:
        raise ValueError(f"Export scale must be one of {EXPORT_SCALES}, got {scale!r}")
    return value


def upscale(source: PixelBuffer, scale: int) -> PixelBuffer:
    if scale == 1:
        return source.copy()
    resized = source.to_image().resize(
        (source.width * scale, source.height * scale), Image.BILINEAR
    )
    return PixelBuffer.from_image(resized)


def export_pipeline(
    source: PixelBuffer,
    settings: Optional[HalftoneSettings] = None,
    scale: int = 2,
    view: View | str = View.HALFTONE,
) -> PixelBuffer:
    """Render ``source`` at ``scale`` times its size for download.

    Only the halftone view is binarized; any other view exports the adjusted
    greyscale image, keyed alpha included.
    """

    scale = check_scale(scale)
    settings = (settings or HalftoneSettings()).clamped()
    view = coerce_enum(View, view, View.HALFTONE, "view")
    LOGGER.info("Exporting %dx%d at %dx (%s)", source.width, source.height, scale, view.value)
    scaled = upscale(source, scale)
    if view is not View.HALFTONE:
        grey, _ = prepare_greyscale(scaled, settings)
        return grey
    return run_pipeline(scaled, settings, frequency_scale=scale)


def export_filename(scale: int) -> str:
    return f"halftone-{scale}x.png"
