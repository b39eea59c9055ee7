from __future__ import annotations

import io

from flask import send_file

from ..processing.buffer import PixelBuffer
from .codec import encode_png


def send_png(buffer: PixelBuffer, download_name: str | None = None):
    data = encode_png(buffer)
    if download_name:
        return send_file(
            io.BytesIO(data),
            mimetype="image/png",
            as_attachment=True,
            download_name=download_name,
        )
    return send_file(io.BytesIO(data), mimetype="image/png")
