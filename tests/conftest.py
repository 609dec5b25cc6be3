from __future__ import annotations

import pytest

from classquiz.core.repository import ClassroomRepository
from classquiz.core.security import PasswordHasher
from classquiz.core.seed import initialize_store
from classquiz.core.store import CollectionStore, MemoryBackend


@pytest.fixture
def hasher() -> PasswordHasher:
    # Lowest cost bcrypt accepts, keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def store() -> CollectionStore:
    return CollectionStore(MemoryBackend())


@pytest.fixture
def repo(store: CollectionStore, hasher: PasswordHasher) -> ClassroomRepository:
    initialize_store(store, hasher)
    return ClassroomRepository(store, hasher)


@pytest.fixture
def empty_repo(store: CollectionStore, hasher: PasswordHasher) -> ClassroomRepository:
    return ClassroomRepository(store, hasher)
