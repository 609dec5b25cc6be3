"""Service for user accounts and credentials."""

from __future__ import annotations

from dataclasses import replace
import logging

from classquiz.constants.storage_constants import USERS_KEY
from classquiz.core.errors import DuplicateEmailError
from classquiz.core.identifiers import new_id, utc_now
from classquiz.core.models import User, UserRole
from classquiz.core.schemas import NewUser
from classquiz.core.security import PasswordHasher
from classquiz.core.store import CollectionStore

logger = logging.getLogger(__name__)


def public_user(user: User) -> User:
    """Return a copy of ``user`` without its stored credential."""
    return replace(user, password_hash=None, class_ids=list(user.class_ids))


class UserService:
    """Manages user records. Every value returned to callers is credential-free."""

    def __init__(self, store: CollectionStore, hasher: PasswordHasher) -> None:
        self._store = store
        self._hasher = hasher

    def load_all(self) -> list[User]:
        """Stored users including credentials; for other services only."""
        return self._store.load(USERS_KEY, User.from_record)

    def save_all(self, users: list[User]) -> None:
        self._store.save(USERS_KEY, users)

    def verify(self, email: str, password: str) -> User | None:
        user = next((u for u in self.load_all() if u.email == email), None)
        if user is None or not self._hasher.verify(password, user.password_hash):
            return None
        return public_user(user)

    def get_by_id(self, user_id: str) -> User | None:
        user = next((u for u in self.load_all() if u.id == user_id), None)
        return public_user(user) if user else None

    def get_by_email(self, email: str) -> User | None:
        user = next((u for u in self.load_all() if u.email == email), None)
        return public_user(user) if user else None

    def get_by_organization(self, organization_id: str) -> list[User]:
        return [public_user(u) for u in self.load_all() if u.organization_id == organization_id]

    def find_admin(self, organization_id: str | None) -> User | None:
        if not organization_id:
            return None
        return next(
            (
                public_user(u)
                for u in self.load_all()
                if u.organization_id == organization_id and u.role is UserRole.ADMIN
            ),
            None,
        )

    def find_super_admin(self) -> User | None:
        return next((public_user(u) for u in self.load_all() if u.role is UserRole.SUPER_ADMIN), None)

    def create(self, data: NewUser, password: str) -> User:
        users = self.load_all()
        wanted = data.email.lower()
        if any(u.email.lower() == wanted for u in users):
            raise DuplicateEmailError(f"A user with email {data.email} already exists.")

        user = User(
            id=new_id("user"),
            email=data.email,
            role=data.role,
            first_name=data.first_name,
            middle_name=data.middle_name,
            last_name=data.last_name,
            organization_id=data.organization_id if data.role is not UserRole.SUPER_ADMIN else None,
            class_ids=list(dict.fromkeys(data.class_ids)),
            points=data.points,
            last_activity=utc_now() if data.role in (UserRole.ADMIN, UserRole.TEACHER) else None,
            password_hash=self._hasher.hash(password),
        )
        users.append(user)
        self.save_all(users)
        logger.info("Created %s user %s", user.role.value, user.id)
        return public_user(user)

    def hash_password(self, password: str) -> str:
        return self._hasher.hash(password)

    def touch_activity(self, user_id: str) -> None:
        users = self.load_all()
        user = next((u for u in users if u.id == user_id), None)
        if user is None:
            return
        user.last_activity = utc_now()
        self.save_all(users)
