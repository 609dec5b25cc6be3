"""Credential hashing for stored user records."""

from __future__ import annotations

from dataclasses import dataclass

import bcrypt

from classquiz.constants.storage_constants import BCRYPT_ROUNDS


@dataclass(slots=True)
class PasswordHasher:
    """bcrypt wrapper with a configurable cost factor."""

    rounds: int = BCRYPT_ROUNDS

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, hashed: str | None) -> bool:
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Malformed hash in storage
            return False
