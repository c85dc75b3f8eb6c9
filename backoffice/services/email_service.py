# -*- coding: utf-8 -*-
"""
SendGrid email service.

The license pipeline awaits ``send`` inside its unit of work, so a send
either returns normally or raises EmailDeliveryError; there is no silent
best-effort path. Messages are built with the SendGrid helper classes and
posted to the v3 API over a requests session so every call carries a
bounded timeout.
"""

from typing import Optional

import requests
from sendgrid.helpers.mail import Mail, Email, To

from backoffice.errors import EmailDeliveryError
from backoffice.services.structured_logging import get_logger

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"

logger = get_logger("backoffice.email")


class EmailService:
    """Sends transactional email through SendGrid."""

    def __init__(
        self,
        api_key: Optional[str],
        from_email: str,
        from_name: str,
        timeout: float = 10.0,
        sandbox: bool = False,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout
        self.sandbox = sandbox
        self.session = session or requests.Session()

        if not self.api_key:
            logger.warning("SENDGRID_API_KEY not set - license emails cannot be delivered")

    @classmethod
    def from_config(cls, config) -> "EmailService":
        return cls(
            api_key=config.get("SENDGRID_API_KEY"),
            from_email=config.get("SENDGRID_FROM_EMAIL"),
            from_name=config.get("SENDGRID_FROM_NAME"),
            timeout=config.get("MAIL_TIMEOUT_SECONDS", 10.0),
            sandbox=config.get("SENDGRID_SANDBOX", False),
        )

    def build_payload(self, to_email: str, subject: str, html: str, text: str) -> dict:
        message = Mail(
            from_email=Email(self.from_email, self.from_name),
            to_emails=To(to_email),
            subject=subject,
            plain_text_content=text,
            html_content=html,
        )
        payload = message.get()
        if self.sandbox:
            payload["mail_settings"] = {"sandbox_mode": {"enable": True}}
        return payload

    def send(self, to_email: str, subject: str, html: str, text: str) -> bool:
        """
        Deliver one message. Returns True once SendGrid accepted it.

        Raises:
            EmailDeliveryError: not configured, timed out, transport failure
                or a non-2xx response from SendGrid.
        """
        if not self.api_key:
            raise EmailDeliveryError("sendgrid_not_configured")

        payload = self.build_payload(to_email, subject, html, text)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = self.session.post(
                SENDGRID_SEND_URL,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.error("SendGrid request timed out", to_email=to_email, timeout=self.timeout)
            raise EmailDeliveryError("timeout")
        except requests.RequestException as e:
            logger.error("SendGrid transport error", to_email=to_email, error=str(e))
            raise EmailDeliveryError("transport_error")

        if not 200 <= resp.status_code < 300:
            logger.error(
                "SendGrid rejected message",
                to_email=to_email,
                status_code=resp.status_code,
                body=resp.text[:500],
            )
            raise EmailDeliveryError(f"sendgrid_status_{resp.status_code}")

        logger.info("Email sent", to_email=to_email, subject=subject)
        return True
