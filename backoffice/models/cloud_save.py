# -*- coding: utf-8 -*-
"""
Raw cloud-save blobs and client log lines.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint
from sqlalchemy.sql import func

from backoffice.database import db


def _utcnow():
    return datetime.now(timezone.utc)


class CloudSave(db.Model):
    __tablename__ = "cloud_saves"
    __table_args__ = (
        UniqueConstraint("email", "username", name="unique_email_username"),
    )

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    username = Column(String(128), nullable=False)
    save_json = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())


class CloudLog(db.Model):
    __tablename__ = "cloud_logs"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    username = Column(String(128), nullable=False)
    device_id = Column(String(128), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow,
                        server_default=func.now(), index=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "deviceId": self.device_id,
            "content": self.content,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
