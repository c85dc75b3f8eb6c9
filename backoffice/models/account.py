# -*- coding: utf-8 -*-
"""
Per-account gameplay state.

An account is identified by the (email, username) pair the game client
reports; one email may own several in-game usernames. Rows are created
lazily on the first gameplay event.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import Column, Integer, String, Boolean, DateTime, UniqueConstraint, false
from sqlalchemy.sql import func

from backoffice.database import db


def _utcnow():
    return datetime.now(timezone.utc)


class AccountReport(db.Model):
    __tablename__ = "account_reports"
    __table_args__ = (
        UniqueConstraint("email", "username", name="uq_account_reports_email_username"),
    )

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    username = Column(String(128), nullable=False)
    wins_total = Column(Integer, nullable=False, default=0, server_default="0")
    losses_total = Column(Integer, nullable=False, default=0, server_default="0")
    has_won = Column(Boolean, nullable=False, default=False, server_default=false())
    first_win_at = Column(DateTime(timezone=True), nullable=True)
    achievements_count = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "username": self.username,
            "winsTotal": self.wins_total,
            "lossesTotal": self.losses_total,
            "hasWon": bool(self.has_won),
            "firstWinAt": self.first_win_at.isoformat() if self.first_win_at else None,
            "achievementsCount": self.achievements_count,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class AccountAchievement(db.Model):
    __tablename__ = "account_achievements"
    __table_args__ = (
        UniqueConstraint("email", "username", "achievement_key",
                         name="uq_account_achievements_email_username_key"),
    )

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    username = Column(String(128), nullable=False)
    achievement_key = Column(String(128), nullable=False)
    unlocked_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())


class AccountDevice(db.Model):
    """Every distinct device an account has reported from. Append-only."""
    __tablename__ = "account_devices"
    __table_args__ = (
        UniqueConstraint("email", "username", "device_id",
                         name="uq_account_devices_email_username_device"),
    )

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    username = Column(String(128), nullable=False)
    device_id = Column(String(128), nullable=False, index=True)
    first_seen_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())


class AccountWarning(db.Model):
    __tablename__ = "account_warnings"
    __table_args__ = (
        UniqueConstraint("email", "username", name="uq_account_warnings_email_username"),
    )

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    username = Column(String(128), nullable=False)
    is_warned = Column(Boolean, nullable=False, default=False, server_default=false())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
