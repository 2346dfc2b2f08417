import os
from flask import Flask, g, request, jsonify

# Load .env only for local/dev. In prod, env vars come from the platform.
if os.getenv("APP_ENV", "development") != "production":
    from dotenv import load_dotenv
    load_dotenv(".env", override=True)


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

    app.config.from_object(get_config())
    if config_overrides:
        app.config.update(config_overrides)

    # --- Required env validation for prod-like envs (staging/production) ---
    def _require(name: str):
        val = os.getenv(name) or app.config.get(name)
        if not val:
            raise RuntimeError(f"Missing required environment variable: {name}")
        return val

    if app_env in ("staging", "production"):
        _require("SECRET_KEY")
        _require("WEBHOOK_URL")

    init_logging(app)
    init_sentry(app)

    if app_env in ("staging", "production"):
        init_security(app)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db, directory=os.path.join(os.path.dirname(app.root_path), "migrations"))
    csrf.init_app(app)
    limiter.init_app(app)

    from .blueprints.main import bp as main_bp
    from .blueprints.api import bp as api_bp

    app.register_blueprint(main_bp)   # "/", "/uploads/<file>"
    app.register_blueprint(api_bp)    # "/api/*"
    # Multipart/JSON API posted by fetch() and external scripts
    csrf.exempt(api_bp)

    # Exempt Flask's static endpoint from default/global limits
    try:
        limiter.exempt(app.view_functions["static"])
    except KeyError:
        pass

    # In-memory SQLite lives as long as the process: create tables at boot.
    # Real databases are managed with `flask db upgrade`.
    if db_is_ephemeral(app.config["SQLALCHEMY_DATABASE_URI"]):
        from . import models  # noqa: F401 (register tables)
        with app.app_context():
            db.create_all()
        _serialize_store_access(app)

    _register_error_handlers(app)

    from .cli import register_cli
    register_cli(app)

    if not (app.config.get("WEBHOOK_URL") or app.config.get("WEBHOOK_TEST_URL")):
        app.logger.warning("No WEBHOOK_URL configured; feedback will be stored but not relayed")

    return app


def db_is_ephemeral(uri: str) -> bool:
    return uri.startswith("sqlite") and (uri.endswith(":memory:") or uri in ("sqlite://", "sqlite:///"))


def _serialize_store_access(app):
    """
    In-memory SQLite is one connection shared by every thread, so a
    rollback in one request undoes flushed rows of another. Requests take
    turns on the store; the session is removed before the lock is released.
    """
    from .services.storage import store_lock

    @app.before_request
    def _acquire_store():
        store_lock.acquire()
        g._holds_store_lock = True

    @app.teardown_request
    def _release_store(exc=None):
        if not g.pop("_holds_store_lock", False):
            return
        try:
            db.session.remove()
        finally:
            store_lock.release()


def _wants_json() -> bool:
    return (
        request.path.startswith("/api/")
        or request.is_json
        or "application/json" in (request.headers.get("Accept") or "").lower()
    )


def _register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(e):
        if _wants_json():
            return jsonify({"message": "Not Found"}), 404
        return ("Not Found", 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        if _wants_json():
            return jsonify({"message": "Method Not Allowed"}), 405
        return ("Method Not Allowed", 405)

    @app.errorhandler(413)
    def too_large(e):
        limit_mb = (app.config.get("MAX_CONTENT_LENGTH") or 0) // (1024 * 1024)
        message = f"Envio muito grande. Limite total de {limit_mb}MB por envio."
        if _wants_json():
            return jsonify({"message": message}), 413
        return (message, 413)

    # 429 Too Many Requests with Retry-After
    @app.errorhandler(429)
    def too_many_requests(e):
        retry_after = getattr(e, "retry_after", None)
        headers = {}
        if retry_after is not None:
            headers["Retry-After"] = str(int(retry_after))
        payload = {"message": "Muitas requisições. Tente novamente em instantes."}
        if retry_after is not None:
            payload["retry_after"] = int(retry_after)
        return (payload, 429, headers)

    @app.errorhandler(500)
    def server_error(e):
        if _wants_json():
            return jsonify({"message": "Erro interno do servidor"}), 500
        return ("Internal Server Error", 500)
