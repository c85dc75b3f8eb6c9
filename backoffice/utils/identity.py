# -*- coding: utf-8 -*-
"""Normalization of the identifiers the game client reports."""


def normalize_email(email: str) -> str:
    """Emails are matched case-insensitively; store them trimmed and lowercased."""
    if not email:
        return ""
    return email.strip().lower()


def normalize_identifier(value: str) -> str:
    """Usernames and device ids are case-sensitive; only trim them."""
    return (value or "").strip()
