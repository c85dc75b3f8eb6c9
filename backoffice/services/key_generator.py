# -*- coding: utf-8 -*-
"""
License key generation.

Keys are 10 characters drawn from an alphabet without the easily confused
0/O and 1/I. Randomness only has to make keys hard to enumerate; the
database unique constraint, not this module, guarantees uniqueness.
"""
import re
import secrets

LICENSE_KEY_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
LICENSE_KEY_LENGTH = 10
LICENSE_KEY_PATTERN = re.compile(rf"^[{LICENSE_KEY_ALPHABET}]{{{LICENSE_KEY_LENGTH}}}$")


def generate_license_key(length: int = LICENSE_KEY_LENGTH, alphabet: str = LICENSE_KEY_ALPHABET) -> str:
    """Return a fresh candidate key, e.g. ``'K7QXM2RTHD'``."""
    return "".join(secrets.choice(alphabet) for _ in range(length))


def normalize_license_key(raw: str) -> str:
    """Keys are case-insensitive and tolerate surrounding whitespace."""
    return (raw or "").strip().upper()
