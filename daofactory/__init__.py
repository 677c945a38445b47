import os
from flask import Flask, jsonify, request

# Load .env only for local/dev. In prod, env vars come from the platform.
if os.getenv("APP_ENV", "development") != "production":
    from dotenv import load_dotenv
    load_dotenv(".env", override=False)


from .config import get_config
from .extensions import db, migrate, csrf, limiter
from .security import init_security
from .observability import init_logging, init_sentry


def create_app(config_overrides=None):
    app = Flask(__name__, template_folder="templates", static_folder="static")

    # ---- Rate limiting storage ----
    app_env = (os.getenv("APP_ENV", "development") or "development").lower()
    use_redis = app_env in ("staging", "production")
    storage_uri = os.environ.get("REDIS_URL") if use_redis else "memory://"
    if use_redis and not storage_uri:
        # Hard fail in stage/prod so we never silently run without RL storage
        raise RuntimeError("REDIS_URL is required in staging/production for rate limiting")
    app.config["RATELIMIT_STORAGE_URI"] = storage_uri
    app.config.setdefault("RATELIMIT_HEADERS_ENABLED", True)

    # Config: clean, explicit, class-based
    app.config.from_object(get_config())
    if config_overrides:
        app.config.update(config_overrides)

    def _require(name: str):
        val = os.getenv(name) or app.config.get(name)
        if not val:
            raise RuntimeError(f"Missing required environment variable: {name}")
        return val

    if app_env in ("staging", "production"):
        # Enforce hard requirements at startup (not at import time)
        _require("SECRET_KEY")
        _require("DATABASE_URL")

    init_logging(app)
    init_sentry(app)

    # HTTPS, HSTS & CSP only in staging/production
    if app_env in ("staging", "production"):
        init_security(app)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db, directory=os.path.join(os.path.dirname(app.root_path), "migrations"))
    csrf.init_app(app)
    limiter.init_app(app)

    from .blueprints.main import bp as main_bp
    from .blueprints.api import bp as api_bp

    app.register_blueprint(main_bp)                      # "/"
    app.register_blueprint(api_bp, url_prefix="/api")

    # JSON API is called cross-origin by agents; no cookies, so no CSRF tokens
    csrf.exempt(api_bp)

    try:
        limiter.exempt(app.view_functions["static"])
    except KeyError:
        pass

    # --- CORS for /api ---
    def _is_api() -> bool:
        return request.path == "/api" or request.path.startswith("/api/")

    @app.before_request
    def api_preflight():
        if request.method == "OPTIONS" and _is_api():
            return ("", 204)
        return None

    @app.after_request
    def api_cors_headers(resp):
        if _is_api():
            resp.headers["Access-Control-Allow-Origin"] = app.config.get("CORS_ORIGIN", "*")
            resp.headers["Access-Control-Allow-Methods"] = "GET, POST, PATCH, OPTIONS"
            resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return resp

    # Health
    @app.get("/healthz")
    @limiter.exempt
    def healthz():
        return {"status": "ok"}, 200

    # Error handlers: JSON under /api, plain text elsewhere
    @app.errorhandler(404)
    def not_found(e):
        if _is_api():
            return jsonify({"error": "Not found"}), 404
        return ("Not Found", 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        if _is_api():
            return jsonify({"error": "Method not allowed"}), 405
        return ("Method Not Allowed", 405)

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        if _is_api():
            return jsonify({"error": "server_error", "code": "internal"}), 500
        return ("Internal Server Error", 500)

    # 429 Too Many Requests: JSON with Retry-After
    @app.errorhandler(429)
    def too_many_requests(e):
        retry_after = getattr(e, "retry_after", None)
        headers = {}
        payload = {"error": "rate_limited", "code": 429}
        if retry_after is not None:
            headers["Retry-After"] = str(int(retry_after))
            payload["retry_after"] = int(retry_after)
        return (payload, 429, headers)

    # CLI commands (ops-grade utilities)
    from .cli import register_cli
    register_cli(app)

    return app
