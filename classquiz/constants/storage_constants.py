"""Storage configuration constants shared by the store, seed routine and services."""

from pathlib import Path

STORAGE_NAMESPACE: str = "classquiz"
DEFAULT_DATA_DIR: Path = Path.home() / ".classquiz"

ORGANIZATIONS_KEY: str = "organizations"
USERS_KEY: str = "users"
CLASSES_KEY: str = "classes"
QUIZZES_KEY: str = "quizzes"
ASSIGNMENTS_KEY: str = "assignments"
ATTEMPTS_KEY: str = "attempts"
STUDENT_ARCHIVES_KEY: str = "student_archives"
NOTIFICATIONS_KEY: str = "notifications"

ALL_COLLECTION_KEYS: tuple[str, ...] = (
    ORGANIZATIONS_KEY,
    USERS_KEY,
    CLASSES_KEY,
    QUIZZES_KEY,
    ASSIGNMENTS_KEY,
    ATTEMPTS_KEY,
    STUDENT_ARCHIVES_KEY,
    NOTIFICATIONS_KEY,
)

DEFAULT_IMPORT_PASSWORD: str = "password"
BCRYPT_ROUNDS: int = 12

ORGANIZATION_CODE_PREFIX_LENGTH: int = 4
ORGANIZATION_CODE_RANDOM_LENGTH: int = 4
CLASS_CODE_DIGITS: int = 4
