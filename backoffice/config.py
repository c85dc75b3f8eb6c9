# -*- coding: utf-8 -*-
import os


def _flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes", "on")


def normalize_db_url(url: str) -> str:
    """
    Normalize DATABASE_URL so SQLAlchemy loads the psycopg v3 driver.
    Hosted Postgres providers still hand out the legacy 'postgres://' scheme.
    """
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://") and "+psycopg://" not in url:
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


class Config:
    """Environment-driven settings, read once when the app is created."""

    def __init__(self):
        self.SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
        self.TESTING = _flag("TESTING")

        db_url = os.environ.get("DATABASE_URL")
        if not db_url:
            db_path = os.path.join(os.path.dirname(__file__), "..", "instance", "backoffice.db")
            os.makedirs(os.path.dirname(db_path), exist_ok=True)
            db_url = f"sqlite:///{os.path.abspath(db_path)}"
        self.SQLALCHEMY_DATABASE_URI = normalize_db_url(db_url)
        self.SQLALCHEMY_TRACK_MODIFICATIONS = False
        self.SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
        if self.SQLALCHEMY_DATABASE_URI.startswith("postgresql"):
            self.SQLALCHEMY_ENGINE_OPTIONS.update({"pool_size": 10, "pool_recycle": 300})

        self.BACKOFFICE_DB_MIGRATE_ON_START = _flag("BACKOFFICE_DB_MIGRATE_ON_START", "true")
        self.BACKOFFICE_DB_AUTOCREATE = _flag("BACKOFFICE_DB_AUTOCREATE")

        # Single shared admin credential for the /api/admin/* surface
        self.BACKOFFICE_ADMIN_TOKEN = os.environ.get("BACKOFFICE_ADMIN_TOKEN")

        self.SENDGRID_API_KEY = os.environ.get("SENDGRID_API_KEY")
        self.SENDGRID_FROM_EMAIL = os.environ.get("SENDGRID_FROM_EMAIL", "no-reply@empirerun.game")
        self.SENDGRID_FROM_NAME = os.environ.get("SENDGRID_FROM_NAME", "Empire Run")
        self.SENDGRID_SANDBOX = _flag("SENDGRID_SANDBOX")
        self.MAIL_TIMEOUT_SECONDS = float(os.environ.get("MAIL_TIMEOUT_SECONDS", "10"))

        self.LICENSE_KEY_MAX_ATTEMPTS = int(os.environ.get("LICENSE_KEY_MAX_ATTEMPTS", "10"))

        self.CORS_ALLOWED_ORIGINS = [
            origin.strip()
            for origin in os.environ.get("CORS_ALLOWED_ORIGINS", "*").split(",")
            if origin.strip()
        ]

        self.RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
        self.ACTIVATION_RATE_LIMIT = os.environ.get("ACTIVATION_RATE_LIMIT", "30 per minute")

        self.BACKOFFICE_METRICS_ENABLED = _flag("BACKOFFICE_METRICS_ENABLED", "true")

        self.LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
        self.BACKOFFICE_LOG_JSON = _flag("BACKOFFICE_LOG_JSON", "true")

    def as_dict(self) -> dict:
        return {k: v for k, v in vars(self).items() if k.isupper()}
