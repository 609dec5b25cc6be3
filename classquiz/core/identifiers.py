"""Helpers for generated ids, join codes and timestamps."""

from __future__ import annotations

from datetime import datetime, timezone
import random
import string
from uuid import uuid4

from classquiz.constants.storage_constants import (
    CLASS_CODE_DIGITS,
    ORGANIZATION_CODE_PREFIX_LENGTH,
    ORGANIZATION_CODE_RANDOM_LENGTH,
)

_CODE_ALPHABET = string.ascii_uppercase + string.digits
_rng = random.SystemRandom()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Return a unique id such as ``quiz-3f2a...``."""
    return f"{prefix}-{uuid4().hex}"


def _name_prefix(name: str) -> str:
    letters = "".join(ch for ch in name if ch.isalnum())
    return letters[:ORGANIZATION_CODE_PREFIX_LENGTH].upper()


def organization_code(name: str, taken: set[str]) -> str:
    """Name prefix plus random alphanumerics, unique among ``taken`` (uppercased)."""
    while True:
        suffix = "".join(_rng.choice(_CODE_ALPHABET) for _ in range(ORGANIZATION_CODE_RANDOM_LENGTH))
        code = _name_prefix(name) + suffix
        if code not in taken:
            return code


def class_code(name: str, taken: set[str]) -> str:
    """Name prefix, a dash and random digits, unique among ``taken`` (uppercased)."""
    while True:
        digits = "".join(_rng.choice(string.digits) for _ in range(CLASS_CODE_DIGITS))
        code = f"{_name_prefix(name)}-{digits}"
        if code not in taken:
            return code
