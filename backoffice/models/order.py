# -*- coding: utf-8 -*-
"""
Purchase orders awaiting (or having received) license fulfillment.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import Column, Integer, BigInteger, String, DateTime
from sqlalchemy.sql import func

from backoffice.database import db


class OrderStatus:
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class Order(db.Model):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    order_code = Column(String(64), nullable=False, unique=True, index=True)
    status = Column(String(16), nullable=False, default=OrderStatus.PENDING, index=True)
    amount = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc), server_default=func.now())
    paid_at = Column(DateTime(timezone=True), nullable=True)
    issued_key = Column(String(32), nullable=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "order_code": self.order_code,
            "status": self.status,
            "amount": self.amount,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "paidAt": self.paid_at.isoformat() if self.paid_at else None,
            "issuedKey": self.issued_key,
        }

    def __repr__(self) -> str:
        return f"<Order {self.order_code} status={self.status}>"
