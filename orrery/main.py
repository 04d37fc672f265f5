# orrery/main.py
from __future__ import annotations

import logging
import os
import traceback
from time import perf_counter
from typing import Final

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from orrery.api.routes import SCENES_EXT_KEY, api as api_bp
from orrery.core.errors import DegenerateGeometry, InvalidConfiguration
from orrery.core.scenes import SCENE_NAMES, build_all_scenes
from orrery.core.validators import ValidationError
from orrery.utils import metrics as M
from orrery.utils.config import load_config_or_defaults
from orrery.version import SERVICE, VERSION

# Request paths counted per-route; anything else would blow up label cardinality.
_TRACKED_PREFIXES: Final = ("/api/",)
_TRACKED_PATHS: Final = ("/", "/health", "/healthz", "/metrics")

# ───────────────────────── helpers: logging & errors ─────────────────────────
def _configure_logging(app: Flask) -> None:
    gerr = logging.getLogger("gunicorn.error")
    if gerr.handlers:
        app.logger.handlers = gerr.handlers
        app.logger.setLevel(gerr.level)
    else:
        logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

def _register_errors(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        app.logger.warning("HTTP %s at %s %s: %s", e.code, request.method, request.path, e.description)
        return jsonify(
            ok=False,
            error="http_error",
            code=e.code,
            name=e.name,
            message=e.description,
            path=request.path,
        ), e.code

    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        app.logger.warning("validation error at %s %s: %s", request.method, request.path, e)
        return jsonify(ok=False, error="validation_error", details=e.errors()), 400

    @app.errorhandler(InvalidConfiguration)
    def _config(e: InvalidConfiguration):
        status = 404 if e.code == "unknown_scene" else 400
        app.logger.warning("%s at %s %s: %s", e.code, request.method, request.path, e)
        return jsonify(ok=False, error=e.code, message=str(e), path=request.path), status

    @app.errorhandler(DegenerateGeometry)
    def _degenerate(e: DegenerateGeometry):
        scene = (request.view_args or {}).get("name", "unknown")
        M.MET_DEGENERATE.labels(scene=scene).inc()
        app.logger.warning("degenerate geometry at %s %s: %s", request.method, request.path, e)
        return jsonify(ok=False, error=e.code, message=str(e), path=request.path), 422

    @app.errorhandler(Exception)
    def _any(e: Exception):
        tb = traceback.format_exc()
        app.logger.error("UNHANDLED %s at %s %s\n%s", type(e).__name__, request.method, request.path, tb)
        return jsonify(
            ok=False,
            error="internal_error",
            type=type(e).__name__,
            message=str(e),
            path=request.path,
        ), 500

# ───────────────────────── health & metrics ─────────────────────────
def _register_health(app: Flask) -> None:
    @app.route("/", methods=["GET"])
    def root():
        return jsonify(ok=True, service=SERVICE, version=VERSION, health="/health"), 200

    @app.route("/health", methods=["GET"])
    @app.route("/healthz", methods=["GET"])
    def health():
        return jsonify(ok=True, status="ok"), 200

def _metrics_auth_ok() -> bool:
    auth = request.authorization
    user = os.getenv("METRICS_USER", "")
    pw = os.getenv("METRICS_PASS", "")
    return bool(
        auth and auth.type == "basic" and auth.username == user and auth.password == pw and user and pw
    )

def _register_metrics(app: Flask) -> None:
    @app.before_request
    def _before():
        p = request.path or ""
        if p.startswith(_TRACKED_PREFIXES) or p in _TRACKED_PATHS:
            route = request.url_rule.rule if request.url_rule is not None else p
            M.MET_REQUESTS.labels(route=route).inc()
            request._t0 = perf_counter()

    @app.after_request
    def _after(resp):
        t0 = getattr(request, "_t0", None)
        if t0 is not None:
            route = request.url_rule.rule if request.url_rule is not None else request.path
            M.REQ_LATENCY.labels(route=route).observe(perf_counter() - t0)
        return resp

    # /metrics (Basic Auth)
    @app.route("/metrics", methods=["GET"])
    def metrics_endpoint():
        if not _metrics_auth_ok():
            return Response("Unauthorized", 401, {"WWW-Authenticate": 'Basic realm="metrics"'})
        M.GAUGE_APP_UP.set(1.0)
        return Response(generate_latest(REGISTRY), mimetype=CONTENT_TYPE_LATEST)

# ───────────────────────── app factory ─────────────────────────
def create_app(cfg=None) -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore

    _configure_logging(app)

    app.cfg = cfg if cfg is not None else load_config_or_defaults()  # type: ignore[attr-defined]
    # a bad scene config stops the app here, not on the first frame
    app.extensions[SCENES_EXT_KEY] = build_all_scenes(app.cfg)  # type: ignore[attr-defined]

    M.seed(
        routes=("/", "/health", "/api/health", "/api/scenes", "/api/scenes/<name>/frame", "/api/season"),
        scenes=SCENE_NAMES,
    )

    _register_health(app)
    _register_errors(app)
    _register_metrics(app)
    app.register_blueprint(api_bp)

    allowed_origin = os.environ.get("CORS_ALLOW_ORIGIN") or "*"
    CORS(
        app,
        resources={r"/.*": {"origins": allowed_origin}},
        supports_credentials=False,
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=600,
    )

    app.logger.info("App initialized; version=%s scenes=%s", VERSION, ",".join(SCENE_NAMES))
    return app

# ───────────────────────── app instance ─────────────────────────
app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
