# -*- coding: utf-8 -*-
"""
Shared request-schema plumbing.

The game client and admin pages send camelCase keys; schemas declare the
snake_case attribute with a camelCase alias and accept either form.
"""
import re
from typing import Type, TypeVar

from flask import request
from pydantic import BaseModel, ConfigDict, ValidationError

from backoffice.errors import RequestValidationError

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

T = TypeVar('T', bound=BaseModel)


class RequestSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra='ignore')


def validate_email_value(v: str) -> str:
    """Basic email validation; returns the trimmed, lowercased address."""
    v = (v or '').strip().lower()
    if not EMAIL_PATTERN.match(v):
        raise ValueError('Invalid email format')
    return v


def _to_request_error(exc: ValidationError) -> RequestValidationError:
    first = exc.errors()[0]
    loc = first.get('loc') or ()
    field = str(loc[0]) if loc else None
    message = first.get('msg', 'Invalid request')
    if field:
        message = f"{field}: {message}"
    return RequestValidationError(message, field=field)


def parse_body(schema: Type[T]) -> T:
    """Validate the JSON body against ``schema``."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise RequestValidationError('Request body must be a JSON object')
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise _to_request_error(e)


def parse_args(schema: Type[T]) -> T:
    """Validate the query string against ``schema``."""
    try:
        return schema.model_validate(request.args.to_dict())
    except ValidationError as e:
        raise _to_request_error(e)
