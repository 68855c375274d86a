"""Tests for the backend() and open_repository() factories."""

import shutil
import tempfile

import pytest

from kvfork import Repository, backend, open_repository
from kvfork.kv.disk import Disk
from kvfork.kv.memory import Memory
from kvfork.kv.namespaced import Namespaced


@pytest.fixture
def tmpdir_path():
    d = tempfile.mkdtemp()
    yield d
    shutil.rmtree(d, ignore_errors=True)


class TestBackend:
    def test_default_is_memory(self):
        assert isinstance(backend(), Memory)

    def test_disk(self, tmpdir_path):
        kv = backend("disk", path=tmpdir_path)
        assert isinstance(kv, Disk)
        kv.close()

    def test_disk_requires_path(self):
        with pytest.raises(ValueError, match="path is required"):
            backend("disk")

    def test_invalid_storage(self):
        with pytest.raises(ValueError, match="Unknown storage"):
            backend("redis")  # type: ignore


class TestOpenRepository:
    def test_memory(self):
        repo = open_repository(author="alice")
        assert isinstance(repo, Repository)
        repo.working["a"] = 1
        assert repo.commit("x").author == "alice"

    def test_project_namespace(self):
        repo = open_repository(project="docs")
        assert isinstance(repo.persistence.store, Namespaced)
        assert repo.persistence.store.namespace == "docs"

    def test_disk_reopen(self, tmpdir_path, clock):
        repo = open_repository("disk", path=tmpdir_path, clock=clock)
        repo.working["a"] = 1
        v = repo.commit("first")
        repo.create_branch("feature")
        repo.persistence.store.close()

        reopened = open_repository("disk", path=tmpdir_path)
        assert reopened.active_branch == "feature"
        assert reopened.head == v
        assert reopened.working["a"] == 1
        reopened.persistence.store.close()
