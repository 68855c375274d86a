"""Projects: several independent repositories in one backend."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import asdict, dataclass
from typing import Any

from .errors import NotFoundError, ValidationError
from .kv.base import KVStore
from .kv.namespaced import Namespaced
from .persistence import KVPersistence, _from_bytes, _to_bytes
from .repository import Repository

logger = logging.getLogger(__name__)

PROJECTS_KEY = "__projects__"


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    created_at: float


class ProjectRegistry:
    """Registry of projects sharing one ``KVStore``.

    Each project's repository state lives under its own key namespace
    (the project id), so projects never see each other's Versions or
    branches.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    def _load(self) -> list[Project]:
        raw = self.store.get(PROJECTS_KEY)
        if raw is None:
            return []
        return [Project(**record) for record in _from_bytes(raw)]

    def _save(self, projects: list[Project]) -> None:
        self.store.set(PROJECTS_KEY, _to_bytes([asdict(p) for p in projects]))

    def list_projects(self) -> list[Project]:
        return self._load()

    def get(self, project_id: str) -> Project:
        for project in self._load():
            if project.id == project_id:
                return project
        raise NotFoundError("project", project_id)

    def create(self, name: str) -> Project:
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            raise ValidationError("Project name is required")
        project = Project(id=uuid.uuid4().hex, name=name, created_at=time.time())
        self._save([*self._load(), project])
        logger.debug("Created project %s (%s)", project.id, name)
        return project

    def delete(self, project_id: str) -> None:
        """Remove a project and every Version and branch it holds."""
        projects = self._load()
        remaining = [p for p in projects if p.id != project_id]
        if len(remaining) == len(projects):
            raise NotFoundError("project", project_id)
        Namespaced(self.store, project_id).clear()
        self._save(remaining)
        logger.info("Deleted project %s", project_id)

    def open(self, project_id: str, **kwargs: Any) -> Repository:
        """Open the repository of a project.

        Keyword arguments are passed on to ``Repository``.
        """
        self.get(project_id)
        persistence = KVPersistence(Namespaced(self.store, project_id))
        return Repository(persistence, **kwargs)
