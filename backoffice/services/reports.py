# -*- coding: utf-8 -*-
"""
Gameplay report aggregation.

Every event (register, win, lose, achievement) lazily creates the
account's report row, records the reporting device and applies its
counter change, all in one transaction. Counters are updated with SQL
expressions so concurrent reports for the same account never lose an
increment.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from backoffice.database.upsert import insert_ignore
from backoffice.errors import RequestValidationError
from backoffice.models import AccountAchievement, AccountDevice, AccountReport
from backoffice.services.metrics import get_metrics_service
from backoffice.services.request_context import bind_context
from backoffice.services.structured_logging import get_logger
from backoffice.utils.identity import normalize_email, normalize_identifier

logger = get_logger("backoffice.reports")

EVENT_REGISTER = "register"
EVENT_WIN = "win"
EVENT_LOSE = "lose"
EVENT_ACHIEVEMENT = "achievement"


class ReportService:

    def __init__(self, session: Session):
        self.session = session

    def register(self, email: str, username: str, device_id: str) -> Dict[str, Any]:
        return self._apply(EVENT_REGISTER, email, username, device_id)

    def record_win(self, email: str, username: str, device_id: str) -> Dict[str, Any]:
        return self._apply(EVENT_WIN, email, username, device_id)

    def record_loss(self, email: str, username: str, device_id: str) -> Dict[str, Any]:
        return self._apply(EVENT_LOSE, email, username, device_id)

    def record_achievement(self, email: str, username: str, device_id: str,
                           achievement_key: str) -> Dict[str, Any]:
        """Unlocking the same achievement twice is a no-op for the counter."""
        achievement_key = normalize_identifier(achievement_key)
        if not achievement_key:
            raise RequestValidationError("achievementKey is required", field="achievementKey")
        return self._apply(EVENT_ACHIEVEMENT, email, username, device_id, achievement_key=achievement_key)

    def list_reports(self, q: Optional[str] = None, limit: int = 200) -> List[AccountReport]:
        query = self.session.query(AccountReport)
        if q:
            pattern = f"%{q.strip()}%"
            query = query.filter(or_(AccountReport.email.ilike(pattern),
                                     AccountReport.username.ilike(pattern)))
        return query.order_by(AccountReport.updated_at.desc(), AccountReport.id.desc()).limit(limit).all()

    def _apply(self, event: str, email: str, username: str, device_id: str,
               achievement_key: Optional[str] = None) -> Dict[str, Any]:
        email = normalize_email(email)
        username = normalize_identifier(username)
        device_id = normalize_identifier(device_id)
        if not email:
            raise RequestValidationError("email is required", field="email")
        if not username:
            raise RequestValidationError("username is required", field="username")
        if not device_id:
            raise RequestValidationError("deviceId is required", field="deviceId")
        bind_context(email=email, username=username, device_id=device_id)

        session = self.session
        now = datetime.now(timezone.utc)
        newly_unlocked = False
        try:
            insert_ignore(
                session,
                AccountReport,
                {"email": email, "username": username, "created_at": now, "updated_at": now},
                conflict_columns=["email", "username"],
            )
            insert_ignore(
                session,
                AccountDevice,
                {"email": email, "username": username, "device_id": device_id, "first_seen_at": now},
                conflict_columns=["email", "username", "device_id"],
            )

            changes: Dict[Any, Any] = {AccountReport.updated_at: now}
            if event == EVENT_WIN:
                changes[AccountReport.wins_total] = AccountReport.wins_total + 1
                changes[AccountReport.has_won] = True
                changes[AccountReport.first_win_at] = func.coalesce(AccountReport.first_win_at, now)
            elif event == EVENT_LOSE:
                changes[AccountReport.losses_total] = AccountReport.losses_total + 1
            elif event == EVENT_ACHIEVEMENT:
                newly_unlocked = insert_ignore(
                    session,
                    AccountAchievement,
                    {
                        "email": email,
                        "username": username,
                        "achievement_key": achievement_key,
                        "unlocked_at": now,
                    },
                    conflict_columns=["email", "username", "achievement_key"],
                )
                if newly_unlocked:
                    changes[AccountReport.achievements_count] = AccountReport.achievements_count + 1

            (
                session.query(AccountReport)
                .filter(AccountReport.email == email, AccountReport.username == username)
                .update(changes, synchronize_session=False)
            )
            report = (
                session.query(AccountReport)
                .filter(AccountReport.email == email, AccountReport.username == username)
                .populate_existing()
                .one()
            )
            result = report.to_dict()
            session.commit()
        except Exception:
            session.rollback()
            raise

        if event == EVENT_ACHIEVEMENT:
            result["achievementKey"] = achievement_key
            result["newlyUnlocked"] = newly_unlocked

        metrics = get_metrics_service()
        if metrics:
            metrics.record_report_event(event)
        logger.log_domain_event(
            "report",
            f"Report event: {event}",
            report_event=event,
            email=email,
            username=username,
            device_id=device_id,
        )
        return result
