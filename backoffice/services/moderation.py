# -*- coding: utf-8 -*-
"""
Device bans and account warnings.

A ban belongs to a physical device: an account playing from several
devices is only blocked on the banned one. A warning belongs to an
account, but it is issued per device: warning a device flags every
account ever recorded on it (see AccountDevice).
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from backoffice.database.upsert import upsert
from backoffice.models import AccountDevice, AccountWarning, DeviceBan
from backoffice.services.metrics import get_metrics_service
from backoffice.services.structured_logging import get_logger
from backoffice.services.request_context import bind_context
from backoffice.utils.identity import normalize_email, normalize_identifier

logger = get_logger("backoffice.moderation")


@dataclass
class DeviceStatus:
    is_banned: bool
    is_warned: bool

    def to_dict(self) -> Dict[str, bool]:
        return {"isBanned": self.is_banned, "isWarned": self.is_warned}


class ModerationService:

    def __init__(self, session: Session):
        self.session = session

    def warn_device(self, device_id: str) -> int:
        """
        Flag every account recorded on ``device_id`` as warned.

        All flags are written in one statement inside one transaction.
        Returns the number of accounts affected (0 for an unknown device).
        """
        device_id = normalize_identifier(device_id)
        bind_context(device_id=device_id)
        session = self.session
        try:
            accounts = (
                session.query(AccountDevice.email, AccountDevice.username)
                .filter(AccountDevice.device_id == device_id)
                .distinct()
                .all()
            )
            if not accounts:
                session.rollback()
                return 0

            now = datetime.now(timezone.utc)
            rows = [
                {"email": email, "username": username, "is_warned": True, "updated_at": now}
                for email, username in accounts
            ]
            upsert(
                session,
                AccountWarning,
                rows,
                conflict_columns=["email", "username"],
                update_columns=["is_warned", "updated_at"],
            )
            session.commit()
        except Exception:
            session.rollback()
            raise

        affected = len(accounts)
        metrics = get_metrics_service()
        if metrics:
            metrics.record_device_warning(affected)
        logger.log_domain_event("device_warned", "Device warned", device_id=device_id, affected_accounts=affected)
        return affected

    def clear_warning(self, email: str, username: str) -> None:
        """Unconditionally clears the warning flag of one account."""
        self._set_warning(email, username, False)
        logger.info("Account warning cleared", email=normalize_email(email), username=normalize_identifier(username))

    def acknowledge_warning(self, email: str, username: str) -> None:
        """Player-side acknowledgement; same effect as an admin clear."""
        self._set_warning(email, username, False)
        logger.info("Account warning acknowledged", email=normalize_email(email), username=normalize_identifier(username))

    def set_ban(self, device_id: str, is_banned: bool) -> None:
        device_id = normalize_identifier(device_id)
        bind_context(device_id=device_id)
        try:
            upsert(
                self.session,
                DeviceBan,
                {"device_id": device_id, "is_banned": bool(is_banned), "updated_at": datetime.now(timezone.utc)},
                conflict_columns=["device_id"],
                update_columns=["is_banned", "updated_at"],
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.log_domain_event("device_ban", "Device ban updated", device_id=device_id, is_banned=bool(is_banned))

    def device_status(self, email: str, username: str, device_id: str) -> DeviceStatus:
        """Ban (per device) and warning (per account); a missing row reads as False."""
        email = normalize_email(email)
        username = normalize_identifier(username)
        device_id = normalize_identifier(device_id)
        is_banned = (
            self.session.query(DeviceBan.is_banned)
            .filter(DeviceBan.device_id == device_id)
            .scalar()
        )
        is_warned = (
            self.session.query(AccountWarning.is_warned)
            .filter(AccountWarning.email == email, AccountWarning.username == username)
            .scalar()
        )
        return DeviceStatus(is_banned=bool(is_banned), is_warned=bool(is_warned))

    def search(self, q: Optional[str] = None, limit: int = 200) -> List[Dict[str, Any]]:
        """One row per (account, device) pair, with its warning and ban flags."""
        query = (
            self.session.query(
                AccountDevice.email,
                AccountDevice.username,
                AccountDevice.device_id,
                AccountDevice.first_seen_at,
                AccountWarning.is_warned,
                DeviceBan.is_banned,
            )
            .outerjoin(
                AccountWarning,
                and_(
                    AccountWarning.email == AccountDevice.email,
                    AccountWarning.username == AccountDevice.username,
                ),
            )
            .outerjoin(DeviceBan, DeviceBan.device_id == AccountDevice.device_id)
        )
        if q:
            pattern = f"%{q.strip()}%"
            query = query.filter(
                or_(
                    AccountDevice.email.ilike(pattern),
                    AccountDevice.username.ilike(pattern),
                    AccountDevice.device_id.ilike(pattern),
                )
            )

        rows = query.order_by(AccountDevice.first_seen_at.desc(), AccountDevice.id.desc()).limit(limit).all()
        return [
            {
                "email": row.email,
                "username": row.username,
                "deviceId": row.device_id,
                "firstSeenAt": row.first_seen_at.isoformat() if row.first_seen_at else None,
                "isWarned": bool(row.is_warned),
                "isBanned": bool(row.is_banned),
            }
            for row in rows
        ]

    def _set_warning(self, email: str, username: str, is_warned: bool) -> None:
        email = normalize_email(email)
        username = normalize_identifier(username)
        bind_context(email=email, username=username)
        try:
            upsert(
                self.session,
                AccountWarning,
                {
                    "email": email,
                    "username": username,
                    "is_warned": is_warned,
                    "updated_at": datetime.now(timezone.utc),
                },
                conflict_columns=["email", "username"],
                update_columns=["is_warned", "updated_at"],
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
