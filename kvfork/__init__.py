"""kvfork: branch, diff and merge a flat key/value document."""

from .ancestry import common_ancestor
from .diff import Change, DiffResult, diff, has_changes
from .equality import MISSING, values_equal
from .errors import (
    IntegrityError,
    KVForkError,
    MergeConflict,
    NotFoundError,
    ValidationError,
)
from .kv.base import KVStore
from .merge import Conflict, MergeResult, three_way_merge
from .persistence import KVPersistence, Persistence
from .projects import Project, ProjectRegistry
from .repository import BranchInfo, BranchMerge, Repository
from .resolvers import MergeFn, counter, prefer_a, prefer_b, union
from .snapshots import SnapshotStore
from .store import backend, open_repository
from .version import MAIN_BRANCH, Branch, Version
from .working import WorkingData

__all__ = [
    "MAIN_BRANCH",
    "MISSING",
    "Branch",
    "BranchInfo",
    "BranchMerge",
    "Change",
    "Conflict",
    "DiffResult",
    "IntegrityError",
    "KVForkError",
    "KVPersistence",
    "KVStore",
    "MergeConflict",
    "MergeFn",
    "MergeResult",
    "NotFoundError",
    "Persistence",
    "Project",
    "ProjectRegistry",
    "Repository",
    "SnapshotStore",
    "ValidationError",
    "Version",
    "WorkingData",
    "backend",
    "common_ancestor",
    "counter",
    "diff",
    "has_changes",
    "open_repository",
    "prefer_a",
    "prefer_b",
    "three_way_merge",
    "union",
    "values_equal",
]
