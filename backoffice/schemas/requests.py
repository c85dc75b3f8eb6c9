# -*- coding: utf-8 -*-
"""
Request schemas for the player-facing and admin endpoints.
"""
import json
from typing import Any, Optional

from pydantic import Field, field_validator

from backoffice.schemas.base import RequestSchema, validate_email_value


# --- Accounts ------------------------------------------------------------

class AccountRequest(RequestSchema):
    """An account is an (email, username) pair."""
    email: str = Field(..., min_length=1, max_length=255)
    username: str = Field(..., min_length=1, max_length=128)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return validate_email_value(v)


class DeviceAccountRequest(AccountRequest):
    device_id: str = Field(..., alias='deviceId', min_length=1, max_length=128)


class AchievementReportRequest(DeviceAccountRequest):
    achievement_key: str = Field(..., alias='achievementKey', min_length=1, max_length=128)


class AckWarningRequest(AccountRequest):
    device_id: Optional[str] = Field(None, alias='deviceId', max_length=128)


class EmailQuery(RequestSchema):
    email: str = Field(..., min_length=1, max_length=255)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return validate_email_value(v)


class SearchQuery(RequestSchema):
    q: Optional[str] = Field(None, max_length=255)
    limit: int = Field(200, ge=1, le=1000)


# --- Orders & licenses ---------------------------------------------------

class CreateOrderRequest(RequestSchema):
    email: str = Field(..., min_length=1, max_length=255)
    order_code: str = Field(..., alias='orderCode', min_length=1, max_length=64)
    amount: int = Field(..., ge=0, description="Amount in the smallest currency unit")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return validate_email_value(v)


class OrderIdRequest(RequestSchema):
    id: int = Field(..., ge=1)


class OrderListQuery(RequestSchema):
    status: Optional[str] = Field(None, pattern=r'^(pending|paid)$')
    limit: int = Field(200, ge=1, le=1000)


class LimitQuery(RequestSchema):
    limit: int = Field(200, ge=1, le=1000)


class ActivateKeyRequest(RequestSchema):
    key: str = Field(..., min_length=1, max_length=64)
    device_hash: Optional[str] = Field(None, alias='deviceHash', max_length=255)


# --- Moderation ----------------------------------------------------------

class WarnDeviceRequest(RequestSchema):
    device_id: str = Field(..., alias='deviceId', min_length=1, max_length=128)


class SetBanRequest(WarnDeviceRequest):
    is_banned: bool = Field(..., alias='isBanned')


# --- Cloud saves & logs --------------------------------------------------

class CloudSaveSyncRequest(AccountRequest):
    save_json: str = Field(..., alias='saveJson', min_length=1)

    @field_validator('save_json', mode='before')
    @classmethod
    def serialize_save(cls, v: Any):
        """Older clients post the save as an object instead of a string."""
        if isinstance(v, (dict, list)):
            return json.dumps(v)
        return v


class CloudLogRequest(DeviceAccountRequest):
    content: str = Field(..., min_length=1)


class LogQuery(RequestSchema):
    email: Optional[str] = Field(None, max_length=255)
    device_id: Optional[str] = Field(None, alias='deviceId', max_length=128)
    limit: int = Field(200, ge=1, le=1000)
