from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Dict

from flask import Flask, jsonify, request

from .config import SETTINGS, configure_logging
from .infrastructure.codec import decode_image
from .infrastructure.network import FETCHER, SourceError
from .infrastructure.responses import send_png
from .processing.buffer import PixelBuffer
from .processing.options import HalftoneSettings, describe_settings
from .processing.pipeline import check_scale, export_filename, export_pipeline, render_view
from .processing.scheduler import LatestOnlyRunner

APP_VERSION = "1.0.0"

LOGGER = logging.getLogger(__name__)

_RUNNERS: "OrderedDict[str, LatestOnlyRunner]" = OrderedDict()
_RUNNERS_LOCK = threading.Lock()


class MissingImage(ValueError):
    """Raised when a request carries neither an upload nor a source URL."""


def runner_for(session_id: str, limit: int | None = None) -> LatestOnlyRunner:
    """Return the runner for ``session_id``, evicting the least recently used past ``limit``."""
    limit = SETTINGS.max_sessions if limit is None else limit
    with _RUNNERS_LOCK:
        runner = _RUNNERS.pop(session_id, None)
        if runner is None:
            runner = LatestOnlyRunner()
        _RUNNERS[session_id] = runner
        while len(_RUNNERS) > max(1, limit):
            _RUNNERS.popitem(last=False)
        return runner


def request_values() -> Dict[str, str]:
    values = request.args.to_dict()
    values.update(request.form.to_dict())
    return values


def load_source(values: Dict[str, str]) -> PixelBuffer:
    upload = request.files.get("image")
    if upload is not None and upload.filename != "":
        return decode_image(upload.read())
    source_url = values.get("source_url")
    if source_url:
        return FETCHER.fetch_source(source_url)
    raise MissingImage("Provide an 'image' upload or a 'source_url'")


def create_app() -> Flask:
    configure_logging()
    app = Flask(__name__)

    @app.errorhandler(ValueError)
    def bad_request(exc: ValueError):
        return jsonify(error=str(exc)), 400

    @app.errorhandler(SourceError)
    def source_error(exc: SourceError):
        LOGGER.error("Source error: %s", exc)
        return jsonify(error=f"Source Error: {exc}"), 502

    @app.route("/halftone", methods=["POST"])
    def halftone():
        values = request_values()
        settings = HalftoneSettings.from_mapping(values)
        source = load_source(values)
        session_id = request.headers.get("X-Session-Id", "default")
        out = runner_for(session_id).run(render_view, source, settings, values.get("view", "halftone"))
        if out is None:
            return jsonify(error="Superseded by a newer request"), 409
        return send_png(out)

    @app.route("/export", methods=["POST"])
    def export():
        values = request_values()
        settings = HalftoneSettings.from_mapping(values)
        scale = check_scale(values.get("scale", SETTINGS.default_export_scale))
        source = load_source(values)
        out = export_pipeline(source, settings, scale, values.get("view", "halftone"))
        return send_png(out, download_name=export_filename(scale))

    @app.route("/settings")
    def settings_view():
        return jsonify(describe_settings())

    @app.route("/health")
    def health():
        return jsonify(ok=True, version=APP_VERSION)

    return app


app = create_app()
