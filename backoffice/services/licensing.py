# -*- coding: utf-8 -*-
"""
License Service

Order intake, order approval (license key issuance + delivery email),
order cancellation and one-time key activation.

Approval runs as a single unit of work around a row lock on the order:
the key row, the order's transition to ``paid`` and the delivery email
either all take effect or none do. The email is sent before the commit;
if it fails, the unit is rolled back and the order stays pending, so a
paid order always has a delivered key.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.database.upsert import insert_ignore, select_for_update
from backoffice.errors import (
    BackofficeError,
    ConflictError,
    EmailDeliveryError,
    LicenseKeyGenerationError,
    RequestValidationError,
)
from backoffice.models import LicenseKey, LicenseKeyStatus, Order, OrderStatus
from backoffice.services.email_templates import (
    LICENSE_EMAIL_SUBJECT,
    build_license_email_html,
    build_license_email_text,
)
from backoffice.services.key_generator import generate_license_key, normalize_license_key
from backoffice.services.metrics import get_metrics_service
from backoffice.services.request_context import bind_context
from backoffice.services.structured_logging import get_logger
from backoffice.utils.identity import normalize_email

logger = get_logger("backoffice.licensing")

APPROVAL_ISSUED = "issued"
APPROVAL_NOT_PENDING = "not_pending"
APPROVAL_ORDER_NOT_FOUND = "order_not_found"
APPROVAL_MAIL_FAILED = "mail_failed"

ACTIVATION_NOT_FOUND = "not_found"
ACTIVATION_ALREADY_ACTIVATED = "already_activated"

DEFAULT_MAX_KEY_ATTEMPTS = 10


@dataclass
class ApprovalResult:
    outcome: str
    order_id: int
    issued_key: Optional[str] = None
    email: Optional[str] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == APPROVAL_ISSUED


@dataclass
class ActivationResult:
    valid: bool
    key: str
    reason: Optional[str] = None
    email: Optional[str] = None
    activated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"valid": self.valid, "key": self.key}
        if self.reason:
            data["reason"] = self.reason
        if self.activated_at:
            data["activatedAt"] = self.activated_at.isoformat()
        return data


@dataclass
class LicenseSummary:
    total_keys: int
    activated_keys: int
    waiting_orders: int
    revenue: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalKeys": self.total_keys,
            "activatedKeys": self.activated_keys,
            "waitingOrders": self.waiting_orders,
            "revenue": self.revenue,
        }


class LicenseService:

    def __init__(
        self,
        session: Session,
        mailer,
        key_generator: Callable[[], str] = generate_license_key,
        max_key_attempts: int = DEFAULT_MAX_KEY_ATTEMPTS,
    ):
        self.session = session
        self.mailer = mailer
        self.key_generator = key_generator
        self.max_key_attempts = max_key_attempts

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def create_order(self, email: str, order_code: str, amount: int) -> Order:
        """Records a pending purchase. order_code must be globally unique."""
        email = normalize_email(email)
        order_code = (order_code or "").strip()
        if not email:
            raise RequestValidationError("email is required", field="email")
        if not order_code:
            raise RequestValidationError("orderCode is required", field="orderCode")
        if amount is None or amount < 0:
            raise RequestValidationError("amount must be a non-negative integer", field="amount")

        order = Order(email=email, order_code=order_code, amount=amount, status=OrderStatus.PENDING)
        try:
            self.session.add(order)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError(f"Order code {order_code} already exists", code="order_code_exists")

        logger.log_domain_event("order_created", "Order created", order_id=order.id, order_code=order_code)
        return order

    def approve_order(self, order_id: int) -> ApprovalResult:
        """
        Issue (or re-issue) the license key for a pending order and email it.

        Re-approving a paid order returns its existing key with outcome
        ``not_pending`` instead of failing.

        Raises:
            LicenseKeyGenerationError: no unique key after max_key_attempts.
                The order is left pending.
        """
        bind_context(order_id=order_id)
        session = self.session
        try:
            order = select_for_update(session, Order, Order.id == order_id).one_or_none()
            if order is None:
                session.rollback()
                self._record_approval(APPROVAL_ORDER_NOT_FOUND)
                return ApprovalResult(APPROVAL_ORDER_NOT_FOUND, order_id)

            email, order_code = order.email, order.order_code

            if order.status != OrderStatus.PENDING:
                existing_key = order.issued_key
                session.rollback()
                self._record_approval(APPROVAL_NOT_PENDING)
                return ApprovalResult(APPROVAL_NOT_PENDING, order_id, issued_key=existing_key, email=email)

            if order.issued_key:
                key = order.issued_key
                if not self._claim_key(key, order_id, email):
                    raise BackofficeError(f"Issued key of order {order_id} belongs to another order")
            else:
                key = self._claim_new_key(order_id, email)

            order.status = OrderStatus.PAID
            order.paid_at = datetime.now(timezone.utc)
            order.issued_key = key
            session.flush()

            delivered = self.mailer.send(
                email,
                LICENSE_EMAIL_SUBJECT,
                build_license_email_html(order_code, key),
                build_license_email_text(order_code, key),
            )
            if not delivered:
                raise EmailDeliveryError("send_failed")
            session.commit()

        except EmailDeliveryError as e:
            session.rollback()
            self._record_approval(APPROVAL_MAIL_FAILED)
            logger.log_domain_event(
                "approval_failed",
                "License email failed, approval rolled back",
                level=logging.WARNING,
                order_id=order_id,
                reason=e.reason,
            )
            return ApprovalResult(APPROVAL_MAIL_FAILED, order_id, email=email, reason=e.reason)
        except Exception:
            session.rollback()
            self._record_approval("error")
            logger.exception("Order approval failed", event_type="approval_failed", order_id=order_id)
            raise

        self._record_approval(APPROVAL_ISSUED)
        logger.log_domain_event("license_issued", "License key issued", order_id=order_id, order_code=order_code)
        return ApprovalResult(APPROVAL_ISSUED, order_id, issued_key=key, email=email)

    def cancel_order(self, order_id: int) -> bool:
        """Deletes the order if it is still pending. Returns False otherwise."""
        bind_context(order_id=order_id)
        try:
            deleted = (
                self.session.query(Order)
                .filter(Order.id == order_id, Order.status == OrderStatus.PENDING)
                .delete(synchronize_session=False)
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        if deleted:
            logger.info("Order cancelled", order_id=order_id)
        return deleted == 1

    def get_order(self, order_id: int) -> Optional[Order]:
        return self.session.get(Order, order_id)

    def list_orders(self, status: Optional[str] = None, limit: int = 200) -> List[Order]:
        query = self.session.query(Order)
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).all()

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def _claim_key(self, key: str, order_id: int, email: str) -> bool:
        """
        Insert the key row for this order, ignoring a conflict on license_key.

        A conflicting row owned by the same order (a retried call) counts as
        claimed; one owned by any other order is a collision.
        """
        inserted = insert_ignore(
            self.session,
            LicenseKey,
            {
                "license_key": key,
                "email": email,
                "order_id": order_id,
                "status": LicenseKeyStatus.UNUSED,
                "created_at": datetime.now(timezone.utc),
            },
            conflict_columns=["license_key"],
        )
        if inserted:
            return True

        owner = (
            self.session.query(LicenseKey.order_id)
            .filter(LicenseKey.license_key == key)
            .scalar()
        )
        return owner == order_id

    def _claim_new_key(self, order_id: int, email: str) -> str:
        for attempt in range(1, self.max_key_attempts + 1):
            candidate = self.key_generator()
            if self._claim_key(candidate, order_id, email):
                return candidate
            logger.warning("License key collision", order_id=order_id, attempt=attempt)
        raise LicenseKeyGenerationError(
            f"No unique license key after {self.max_key_attempts} attempts"
        )

    def activate_key(self, raw_key: str, device_hash: Optional[str] = None) -> ActivationResult:
        """
        Consume a license key exactly once.

        The row lock serialises concurrent activations of the same key; the
        conditional UPDATE (status still unused) keeps the guarantee on
        stores without row locking.
        """
        key = normalize_license_key(raw_key)
        if not key:
            raise RequestValidationError("key is required", field="key")

        session = self.session
        try:
            row = select_for_update(session, LicenseKey, LicenseKey.license_key == key).one_or_none()
            if row is None:
                session.rollback()
                return self._activation_outcome(ActivationResult(False, key, reason=ACTIVATION_NOT_FOUND))

            if row.status == LicenseKeyStatus.ACTIVATED:
                session.rollback()
                return self._activation_outcome(ActivationResult(False, key, reason=ACTIVATION_ALREADY_ACTIVATED))

            row_id, email = row.id, row.email
            now = datetime.now(timezone.utc)
            updated = (
                session.query(LicenseKey)
                .filter(LicenseKey.id == row_id, LicenseKey.status == LicenseKeyStatus.UNUSED)
                .update(
                    {
                        LicenseKey.status: LicenseKeyStatus.ACTIVATED,
                        LicenseKey.activated_at: now,
                        LicenseKey.device_hash: device_hash,
                    },
                    synchronize_session=False,
                )
            )
            if updated != 1:
                session.rollback()
                return self._activation_outcome(ActivationResult(False, key, reason=ACTIVATION_ALREADY_ACTIVATED))

            session.commit()
        except Exception:
            session.rollback()
            raise

        return self._activation_outcome(ActivationResult(True, key, email=email, activated_at=now))

    def list_license_keys(self, limit: int = 200) -> List[LicenseKey]:
        return (
            self.session.query(LicenseKey)
            .order_by(LicenseKey.created_at.desc(), LicenseKey.id.desc())
            .limit(limit)
            .all()
        )

    def summary(self) -> LicenseSummary:
        total_keys = self.session.query(func.count(LicenseKey.id)).scalar() or 0
        activated_keys = (
            self.session.query(func.count(LicenseKey.id))
            .filter(LicenseKey.status == LicenseKeyStatus.ACTIVATED)
            .scalar() or 0
        )
        waiting_orders = (
            self.session.query(func.count(Order.id))
            .filter(Order.status == OrderStatus.PENDING)
            .scalar() or 0
        )
        revenue = (
            self.session.query(func.coalesce(func.sum(Order.amount), 0))
            .filter(Order.status == OrderStatus.PAID)
            .scalar() or 0
        )
        return LicenseSummary(total_keys, activated_keys, waiting_orders, int(revenue))

    # ------------------------------------------------------------------

    def _activation_outcome(self, result: ActivationResult) -> ActivationResult:
        outcome = "activated" if result.valid else result.reason
        metrics = get_metrics_service()
        if metrics:
            metrics.record_activation(outcome)
        logger.log_domain_event(
            "license_activation",
            f"License activation: {outcome}",
            key_suffix=result.key[-4:],
            valid=result.valid,
        )
        return result

    def _record_approval(self, outcome: str) -> None:
        metrics = get_metrics_service()
        if metrics:
            metrics.record_approval(outcome)
