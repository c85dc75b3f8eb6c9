import os
import tempfile
import threading

import pytest

from backoffice.database import db
from backoffice.errors import EmailDeliveryError
from backoffice.factory import create_app
from backoffice.services.registry import get_services

ADMIN_TOKEN = "test-admin-token"


class RecordingMailer:
    """Stands in for EmailService; keeps every message instead of sending it."""

    def __init__(self):
        self.sent = []

    def send(self, to_email, subject, html, text):
        self.sent.append({"to": to_email, "subject": subject, "html": html, "text": text})
        return True


class FailingMailer:
    """Every send fails the way a SendGrid timeout does."""

    def __init__(self, reason="timeout"):
        self.reason = reason
        self.attempts = 0

    def send(self, to_email, subject, html, text):
        self.attempts += 1
        raise EmailDeliveryError(self.reason)


@pytest.fixture
def app():
    """Create and configure a new app instance for each test."""
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        "SQLALCHEMY_ENGINE_OPTIONS": {},
        "BACKOFFICE_ADMIN_TOKEN": ADMIN_TOKEN,
        "BACKOFFICE_DB_MIGRATE_ON_START": False,
        "RATELIMIT_ENABLED": False,
        "SENDGRID_API_KEY": None,
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def services(app):
    return get_services()


@pytest.fixture
def mailer(services):
    recording = RecordingMailer()
    services.set_mailer(recording)
    return recording


@pytest.fixture
def failing_mailer(services):
    failing = FailingMailer()
    services.set_mailer(failing)
    return failing


@pytest.fixture
def recording_mailer_class():
    return RecordingMailer


@pytest.fixture
def run_concurrently(app):
    """
    Run ``fn`` from ``n`` threads released together by a barrier.

    Each thread gets its own app context, and so its own session and
    connection. Returns (results, errors).
    """
    def run(fn, n=8):
        barrier = threading.Barrier(n)
        results, errors = [], []

        def worker():
            with app.app_context():
                try:
                    barrier.wait()
                    results.append(fn())
                except Exception as e:
                    errors.append(e)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker) for _ in range(n)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)
        return results, errors

    return run
