"""Infrastructure helpers for decoding, fetching and sending images."""

from .codec import decode_image, encode_png
from .network import FETCHER, SourceError, SourceFetcher
from .responses import send_png

__all__ = [
    "decode_image",
    "encode_png",
    "FETCHER",
    "SourceError",
    "SourceFetcher",
    "send_png",
]
