# -*- coding: utf-8 -*-
"""Append-only store for log lines uploaded by game clients."""

from typing import List, Optional

from sqlalchemy.orm import Session

from backoffice.errors import RequestValidationError
from backoffice.models import CloudLog
from backoffice.utils.identity import normalize_email, normalize_identifier

MAX_LOG_CONTENT = 64 * 1024


class CloudLogService:

    def __init__(self, session: Session):
        self.session = session

    def append(self, email: str, username: str, device_id: str, content: str) -> CloudLog:
        email = normalize_email(email)
        if not email:
            raise RequestValidationError("email is required", field="email")
        if not content:
            raise RequestValidationError("content is required", field="content")
        if len(content) > MAX_LOG_CONTENT:
            raise RequestValidationError("content is too large", field="content")

        entry = CloudLog(
            email=email,
            username=normalize_identifier(username),
            device_id=normalize_identifier(device_id),
            content=content,
        )
        try:
            self.session.add(entry)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return entry

    def recent(self, email: Optional[str] = None, device_id: Optional[str] = None,
               limit: int = 200) -> List[CloudLog]:
        query = self.session.query(CloudLog)
        if email:
            query = query.filter(CloudLog.email == normalize_email(email))
        if device_id:
            query = query.filter(CloudLog.device_id == normalize_identifier(device_id))
        return query.order_by(CloudLog.created_at.desc(), CloudLog.id.desc()).limit(limit).all()
