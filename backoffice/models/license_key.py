# -*- coding: utf-8 -*-
"""
License keys issued at order approval and consumed once by activation.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.database import db


class LicenseKeyStatus:
    UNUSED = "unused"
    ACTIVATED = "activated"


class LicenseKey(db.Model):
    __tablename__ = "license_keys"

    id = Column(Integer, primary_key=True)
    license_key = Column(String(32), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    # one key per order; the order row is never deleted once paid
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)
    status = Column(String(16), nullable=False, default=LicenseKeyStatus.UNUSED)
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc), server_default=func.now())
    activated_at = Column(DateTime(timezone=True), nullable=True)
    device_hash = Column(String(128), nullable=True)

    order = relationship("Order", foreign_keys=[order_id])

    @property
    def is_activated(self) -> bool:
        return self.status == LicenseKeyStatus.ACTIVATED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "key": self.license_key,
            "email": self.email,
            "orderId": self.order_id,
            "status": self.status,
            "isActivated": self.is_activated,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "activatedAt": self.activated_at.isoformat() if self.activated_at else None,
            "deviceHash": self.device_hash,
        }

    def __repr__(self) -> str:
        return f"<LicenseKey {self.license_key} status={self.status}>"
