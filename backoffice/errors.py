# -*- coding: utf-8 -*-
"""Exception classes raised by the backoffice services."""


class BackofficeError(Exception):
    """Base exception for all backoffice errors."""

    code = "server_error"
    status_code = 500

    def __init__(self, message: str = None, code: str = None, status_code: int = None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code


class RequestValidationError(BackofficeError):
    """Raised when a required field is missing or malformed."""

    code = "validation_error"
    status_code = 400

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class ConflictError(BackofficeError):
    """Raised when a unique value is already taken."""

    code = "conflict"
    status_code = 409


class LicenseKeyGenerationError(BackofficeError):
    """Could not generate a unique license key."""

    code = "failed_to_generate_unique_key"
    status_code = 500


class EmailDeliveryError(BackofficeError):
    """The outbound email could not be delivered."""

    code = "mail_failed"
    status_code = 502

    def __init__(self, reason: str):
        super().__init__(f"Email delivery failed: {reason}")
        self.reason = reason
