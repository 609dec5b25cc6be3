"""Exceptions raised by the classroom quiz store."""

from __future__ import annotations


class ClassQuizError(Exception):
    """Base class for store errors."""


class StoreCorruptedError(ClassQuizError):
    """Raised when a stored collection cannot be decoded."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Stored collection '{key}' is corrupted: {reason}")
        self.key = key


class TeacherContextError(ClassQuizError):
    """Raised when an authoring operation has no valid teacher/organization context."""


class StudentNotFoundError(ClassQuizError):
    """Raised when a submission references a missing student."""


class QuizNotFoundError(ClassQuizError):
    """Raised when a submission references a missing quiz."""


class DuplicateEmailError(ClassQuizError):
    """Raised when a user is created with an email that is already registered."""
