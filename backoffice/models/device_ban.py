# -*- coding: utf-8 -*-
from datetime import datetime, timezone

from sqlalchemy import Column, String, Boolean, DateTime, false
from sqlalchemy.sql import func

from backoffice.database import db


class DeviceBan(db.Model):
    """One ban flag per physical device, independent of the accounts using it."""
    __tablename__ = "device_bans"

    device_id = Column(String(128), primary_key=True)
    is_banned = Column(Boolean, nullable=False, default=False, server_default=false())
    updated_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc), server_default=func.now())
