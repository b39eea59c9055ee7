"""Pixel-transform pipeline: greyscale, levels, background keying and binarizers."""

from .buffer import InvalidDimensions, Mask, PixelBuffer
from .dither import apply_diffusion_dither, apply_pattern_dither, apply_threshold
from .enhance import adjust_levels, contrast_factor, to_greyscale
from .halftone import SHAPES, apply_halftone
from .masking import build_background_mask, remove_background, sample_background
from .options import (
    BinarizeOptions,
    HalftoneOptions,
    HalftoneSettings,
    Method,
    SamplePosition,
    SettingsError,
    Shape,
    View,
)
from .pipeline import BINARIZERS, export_filename, export_pipeline, render_view, run_pipeline
from .scheduler import LatestOnlyRunner

__all__ = [
    "InvalidDimensions",
    "Mask",
    "PixelBuffer",
    "apply_diffusion_dither",
    "apply_pattern_dither",
    "apply_threshold",
    "adjust_levels",
    "contrast_factor",
    "to_greyscale",
    "SHAPES",
    "apply_halftone",
    "build_background_mask",
    "remove_background",
    "sample_background",
    "BinarizeOptions",
    "HalftoneOptions",
    "HalftoneSettings",
    "Method",
    "SamplePosition",
    "SettingsError",
    "Shape",
    "View",
    "BINARIZERS",
    "export_filename",
    "export_pipeline",
    "render_view",
    "run_pipeline",
    "LatestOnlyRunner",
]
