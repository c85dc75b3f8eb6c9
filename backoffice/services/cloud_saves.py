# -*- coding: utf-8 -*-
"""
Cloud saves: one opaque JSON blob per (email, username).

The server never parses the blob; it only stores the latest copy the
client pushed and hands it back on fetch.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from backoffice.database.upsert import upsert
from backoffice.errors import RequestValidationError
from backoffice.models import (
    AccountAchievement,
    AccountDevice,
    AccountReport,
    AccountWarning,
    CloudSave,
)
from backoffice.services.structured_logging import get_logger
from backoffice.utils.identity import normalize_email, normalize_identifier

logger = get_logger("backoffice.cloud_saves")


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class CloudSaveService:

    def __init__(self, session: Session):
        self.session = session

    def sync(self, email: str, username: str, save_json: str) -> Dict[str, Any]:
        """Store the latest save for the account, replacing any previous one."""
        email = normalize_email(email)
        username = normalize_identifier(username)
        if not email:
            raise RequestValidationError("email is required", field="email")
        if not username:
            raise RequestValidationError("username is required", field="username")
        if save_json is None or save_json == "":
            raise RequestValidationError("saveJson is required", field="saveJson")

        now = datetime.now(timezone.utc)
        try:
            upsert(
                self.session,
                CloudSave,
                {"email": email, "username": username, "save_json": save_json, "updated_at": now},
                conflict_columns=["email", "username"],
                update_columns=["save_json", "updated_at"],
            )
            save_id = (
                self.session.query(CloudSave.id)
                .filter(CloudSave.email == email, CloudSave.username == username)
                .scalar()
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info("Cloud save synced", email=email, username=username, size=len(save_json))
        return {"id": save_id, "email": email, "username": username, "updatedAt": _iso(now)}

    def fetch(self, email: str, username: str) -> Optional[CloudSave]:
        return (
            self.session.query(CloudSave)
            .filter(CloudSave.email == normalize_email(email),
                    CloudSave.username == normalize_identifier(username))
            .one_or_none()
        )

    def list_by_email(self, email: str) -> List[Dict[str, Any]]:
        rows = (
            self.session.query(CloudSave.id, CloudSave.username, CloudSave.updated_at)
            .filter(CloudSave.email == normalize_email(email))
            .order_by(CloudSave.updated_at.desc(), CloudSave.id.desc())
            .all()
        )
        return [
            {"id": row.id, "username": row.username, "updatedAt": _iso(row.updated_at)}
            for row in rows
        ]

    def delete_save(self, email: str, username: str) -> bool:
        try:
            deleted = (
                self.session.query(CloudSave)
                .filter(CloudSave.email == normalize_email(email),
                        CloudSave.username == normalize_identifier(username))
                .delete(synchronize_session=False)
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        if deleted:
            logger.info("Cloud save deleted", email=normalize_email(email), username=username)
        return deleted == 1

    def list_emails(self) -> List[Dict[str, Any]]:
        """Every email with at least one save, most recently active first."""
        last_update = func.max(CloudSave.updated_at)
        rows = (
            self.session.query(
                CloudSave.email,
                func.count(CloudSave.id).label("save_count"),
                last_update.label("last_update"),
            )
            .group_by(CloudSave.email)
            .order_by(last_update.desc())
            .all()
        )
        return [
            {"email": row.email, "saveCount": row.save_count, "lastUpdate": _iso(row.last_update)}
            for row in rows
        ]

    def wipe_email(self, email: str) -> Dict[str, int]:
        """
        Delete everything stored for an email: saves, report counters,
        achievements, recorded devices and warnings.

        Device bans are keyed by device, not by account, and survive.
        """
        email = normalize_email(email)
        if not email:
            raise RequestValidationError("email is required", field="email")

        counts: Dict[str, int] = {}
        try:
            for name, model in (
                ("saves", CloudSave),
                ("reports", AccountReport),
                ("achievements", AccountAchievement),
                ("devices", AccountDevice),
                ("warnings", AccountWarning),
            ):
                counts[name] = (
                    self.session.query(model)
                    .filter(model.email == email)
                    .delete(synchronize_session=False)
                )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.warning("Account data wiped", email=email, **counts)
        return counts
