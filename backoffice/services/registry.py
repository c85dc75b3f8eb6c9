# -*- coding: utf-8 -*-
"""
Per-app service wiring.

Services are built once in ``create_app`` against the Flask-SQLAlchemy
scoped session and stored under ``app.extensions["backoffice"]``. Routes
fetch them with ``get_services()`` and never open store clients
themselves; tests swap collaborators (the mailer) on the registry.
"""

from dataclasses import dataclass

from flask import Flask, current_app

from backoffice.database import db
from backoffice.services.cloud_logs import CloudLogService
from backoffice.services.cloud_saves import CloudSaveService
from backoffice.services.email_service import EmailService
from backoffice.services.licensing import LicenseService
from backoffice.services.moderation import ModerationService
from backoffice.services.reports import ReportService

EXTENSION_KEY = "backoffice"


@dataclass
class ServiceRegistry:
    licensing: LicenseService
    moderation: ModerationService
    reports: ReportService
    cloud_saves: CloudSaveService
    cloud_logs: CloudLogService
    mailer: object

    def set_mailer(self, mailer) -> None:
        """Replace the outbound mail collaborator (used by tests)."""
        self.mailer = mailer
        self.licensing.mailer = mailer


def init_services(app: Flask, mailer=None) -> ServiceRegistry:
    """Build the service registry for ``app`` and attach it to the app."""
    mailer = mailer or EmailService.from_config(app.config)
    session = db.session
    registry = ServiceRegistry(
        licensing=LicenseService(
            session,
            mailer,
            max_key_attempts=app.config.get("LICENSE_KEY_MAX_ATTEMPTS", 10),
        ),
        moderation=ModerationService(session),
        reports=ReportService(session),
        cloud_saves=CloudSaveService(session),
        cloud_logs=CloudLogService(session),
        mailer=mailer,
    )
    app.extensions[EXTENSION_KEY] = registry
    return registry


def get_services() -> ServiceRegistry:
    return current_app.extensions[EXTENSION_KEY]
