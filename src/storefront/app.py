import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront.core.config import Config
from storefront.core.dependencies import EXTENSION_KEY, build_container
from storefront.core.exceptions import BaseAPIException
from storefront.db import create_db_engine, init_schema
from storefront.routes import cart_bp, categories_bp, orders_bp, products_bp

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None) -> Flask:
    """
    Application factory.

    Tests pass their own Config (SQLite file, fixed secret); everything else
    reads the environment.
    """
    config = config or Config.from_env()
    config.validate()

    logging.basicConfig(
        level=getattr(logging, config.app.log_level.upper(), logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    app = Flask(__name__)
    app.config["DEBUG"] = config.app.debug

    engine = create_db_engine(config.database)
    if not config.is_production:
        init_schema(engine)

    app.extensions[EXTENSION_KEY] = build_container(config, engine)

    # ------------------------------------------------------------------ #
    # Blueprints, each resource registered under /api/                    #
    # ------------------------------------------------------------------ #
    app.register_blueprint(products_bp,   url_prefix="/api/products")
    app.register_blueprint(categories_bp, url_prefix="/api/categories")
    app.register_blueprint(cart_bp,       url_prefix="/api/cart")
    app.register_blueprint(orders_bp,     url_prefix="/api/orders")

    _register_error_handlers(app)

    # ------------------------------------------------------------------ #
    # Health check                                                         #
    # ------------------------------------------------------------------ #
    @app.get("/api/health")
    def health():
        """Liveness + readiness probe. Returns 503 if DB is unreachable."""
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return jsonify({
                "status": "ok",
                "database": "reachable",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }), 200
        except SQLAlchemyError as exc:
            logger.error(f"Health check failed: {exc}")
            return jsonify({"status": "error", "database": "unreachable"}), 503

    logger.info(f"Storefront API ready ({config.app.environment})")
    return app


def _register_error_handlers(app: Flask) -> None:
    """Consistent JSON error envelope"""

    @app.errorhandler(BaseAPIException)
    def api_error(e: BaseAPIException):
        if e.status_code >= 500:
            logger.error(f"{e.error_code}: {e.internal_message or e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(400)
    def bad_request(e):
        return _error_envelope("BAD_REQUEST", str(e.description)), 400

    @app.errorhandler(404)
    def not_found(e):
        return _error_envelope("NOT_FOUND", "Resource not found"), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return _error_envelope("METHOD_NOT_ALLOWED", str(e.description)), 405

    @app.errorhandler(SQLAlchemyError)
    def db_error(e):
        logger.exception("Unhandled database error")
        return _error_envelope("DATABASE_ERROR", "A database error occurred."), 500

    @app.errorhandler(500)
    def internal_error(e):
        return _error_envelope("INTERNAL_ERROR", "An internal server error occurred."), 500


def _error_envelope(code: str, message: str):
    return jsonify({"success": False, "error": {"code": code, "message": message, "details": {}}})


if __name__ == "__main__":
    app_config = Config.from_env()
    application = create_app(app_config)
    application.run(debug=app_config.app.debug, host=app_config.app.host, port=app_config.app.port)
