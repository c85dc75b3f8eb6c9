# -*- coding: utf-8 -*-
from pathlib import Path
from typing import Optional

from flask import Flask
from flask_cors import CORS

from backoffice.config import Config
from backoffice.database import db

# Observability imports
from backoffice.services.metrics import init_metrics
from backoffice.services.request_context import init_request_context
from backoffice.services.structured_logging import init_logging

BASE_DIR = Path(__file__).resolve().parent.parent


def _migrate_db(app):
    """Run Alembic migrations to head using the app's DB URL."""
    from alembic import command
    from alembic.config import Config as AlembicConfig

    cfg = AlembicConfig()  # in-memory config, avoid alembic.ini dependency
    cfg.set_main_option("script_location", str(BASE_DIR / "migrations"))
    cfg.set_main_option("sqlalchemy.url", app.config["SQLALCHEMY_DATABASE_URI"])

    try:
        command.upgrade(cfg, "head")
        app.logger.info("Database migrations applied successfully")
    except Exception as e:
        app.logger.error(f"Migration failed: {e}")
        raise


def create_app(config_overrides: Optional[dict] = None) -> Flask:
    app = Flask(__name__)
    app.url_map.strict_slashes = False

    # --- Config (env first, then explicit overrides, e.g. from tests) ---
    app.config.update(Config().as_dict())
    if config_overrides:
        app.config.update(config_overrides)

    # --- DB ---
    db.init_app(app)

    # --- CORS ---
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config["CORS_ALLOWED_ORIGINS"],
            "methods": ["GET", "POST", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", "X-Admin-Token", "X-Request-ID"],
            "supports_credentials": False,
            "max_age": 600,
        }}
    )

    # --- Initialize observability ---
    # Request context first so the logging middleware sees the request_id
    init_request_context(app)
    init_logging(app)
    init_metrics(app)

    # --- Rate limiting (activation endpoint) ---
    from backoffice.routes.licenses import limiter
    limiter.init_app(app)

    # --- Error handlers ---
    from backoffice.middleware.errors import register_error_handlers
    register_error_handlers(app)

    # --- Mount blueprints ---
    from backoffice.routes import cloud, gameplay, health, licenses, moderation, orders
    app.register_blueprint(health.health_bp)
    app.register_blueprint(orders.orders_bp)
    app.register_blueprint(licenses.licenses_bp)
    app.register_blueprint(gameplay.gameplay_bp)
    app.register_blueprint(moderation.moderation_bp)
    app.register_blueprint(cloud.cloud_bp)

    # --- Services ---
    from backoffice.services.registry import init_services
    init_services(app)

    # --- DB init ---
    with app.app_context():
        # Only auto-create tables in testing or if explicitly enabled
        is_testing = bool(app.config.get("TESTING"))
        if is_testing or app.config.get("BACKOFFICE_DB_AUTOCREATE"):
            from backoffice import models  # noqa: F401  (register tables on the metadata)
            db.create_all()

        # Skip migrations in test mode since db.create_all() already creates the schema
        if not is_testing and app.config.get("BACKOFFICE_DB_MIGRATE_ON_START"):
            _migrate_db(app)

    return app
