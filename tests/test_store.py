from __future__ import annotations

import pytest

from classquiz.constants.storage_constants import CLASSES_KEY, ORGANIZATIONS_KEY, USERS_KEY
from classquiz.core.errors import StoreCorruptedError
from classquiz.core.models import Organization
from classquiz.core.seed import SAMPLE_ORG_ID, initialize_store
from classquiz.core.store import CollectionStore, FileBackend, MemoryBackend


def test_missing_collection_reads_as_empty(store):
    assert store.get(CLASSES_KEY) == []
    assert not store.has(CLASSES_KEY)


def test_set_overwrites_whole_collection(store):
    store.set(CLASSES_KEY, [{"id": "a"}, {"id": "b"}])
    store.set(CLASSES_KEY, [{"id": "c"}])
    assert store.get(CLASSES_KEY) == [{"id": "c"}]


def test_keys_are_namespaced():
    backend = MemoryBackend()
    CollectionStore(backend, namespace="school").set(USERS_KEY, [])
    assert backend.keys() == ["school_users"]


def test_corrupt_collection_fails_fast():
    backend = MemoryBackend({"classquiz_users": "{not json"})
    with pytest.raises(StoreCorruptedError):
        CollectionStore(backend).get(USERS_KEY)


def test_non_list_collection_is_corrupt():
    backend = MemoryBackend({"classquiz_users": '{"id": "x"}'})
    with pytest.raises(StoreCorruptedError):
        CollectionStore(backend).get(USERS_KEY)


def test_file_backend_persists_between_instances(tmp_path):
    first = CollectionStore(FileBackend(tmp_path))
    first.save(ORGANIZATIONS_KEY, [Organization(id="org-9", name="Nine", code="NINE0000")])

    second = CollectionStore(FileBackend(tmp_path))
    organizations = second.load(ORGANIZATIONS_KEY, Organization.from_record)
    assert [o.id for o in organizations] == ["org-9"]
    assert (tmp_path / "classquiz_organizations.json").exists()

    second.remove(ORGANIZATIONS_KEY)
    assert not first.has(ORGANIZATIONS_KEY)


def test_seed_runs_once(store, hasher):
    assert initialize_store(store, hasher) is True
    assert initialize_store(store, hasher) is False
    organizations = store.load(ORGANIZATIONS_KEY, Organization.from_record)
    assert [o.id for o in organizations] == [SAMPLE_ORG_ID]


def test_seeded_sample_users_can_sign_in(repo):
    user = repo.verify_user("teacher@example.com", "password")
    assert user is not None
    assert user.id == "teacher-1"
    assert user.password_hash is None
