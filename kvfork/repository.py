"""Repository: branches, commits, merges and rollbacks over one document."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from .ancestry import common_ancestor
from .diff import DiffResult, diff, has_changes
from .errors import IntegrityError, NotFoundError, ValidationError
from .merge import Conflict, MergeResult, three_way_merge
from .persistence import KVPersistence, Persistence
from .resolvers import MergeFn
from .snapshots import SnapshotStore
from .version import (
    DEFAULT_AUTHOR,
    MAIN_BRANCH,
    Branch,
    Version,
    is_valid_branch_name,
)
from .working import WorkingData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BranchMerge:
    """A computed (not yet committed) merge of one branch into another.

    Side A of the underlying merge is the source branch, side B the
    target.
    """

    source_branch: str
    target_branch: str
    source_version: Version
    target_version: Version
    base: Version | None
    result: MergeResult

    def __bool__(self) -> bool:
        return self.result.success

    @property
    def success(self) -> bool:
        return self.result.success

    @property
    def merged_data(self) -> dict[str, Any]:
        return self.result.merged_data

    @property
    def conflicts(self) -> tuple[Conflict, ...]:
        return self.result.conflicts

    def resolve(self, resolutions: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """See ``MergeResult.resolve``."""
        return self.result.resolve(resolutions)


@dataclass(frozen=True)
class BranchInfo:
    """A branch with its head Version and the length of its history."""

    name: str
    head: Version | None
    version_count: int
    active: bool


class Repository:
    """One working copy of a versioned document.

    Holds the snapshot store, the branch registry, the active branch
    and the working data. Several repositories can live in one process;
    none of this is global.

    Every mutating operation computes the new state, writes it through
    ``persistence`` and only then swaps it in. If validation or the
    write fails, nothing changes.

    Args:
        persistence: Storage collaborator (default: in-memory).
        author: Author recorded when an operation is not given one.
        clock: Time source for Version timestamps (default ``time.time``).
    """

    def __init__(
        self,
        persistence: Persistence | None = None,
        *,
        author: str = DEFAULT_AUTHOR,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.persistence = persistence if persistence is not None else KVPersistence()
        self.author = author
        self._clock = clock
        self.working = WorkingData()
        self._merge_fns: dict[str, MergeFn] = {}
        self._default_merge: MergeFn | None = None
        self._load()

    def _load(self) -> None:
        store = SnapshotStore(self.persistence.load_versions(), clock=self._clock)
        branches = self.persistence.load_branches()
        active = self.persistence.load_active_branch()
        if active not in branches:
            logger.warning("Active branch %r is missing, falling back to main", active)
            active = MAIN_BRANCH

        head_id = branches[active]
        if head_id is not None and head_id not in store:
            raise IntegrityError(f"Branch {active!r} points at missing version {head_id}")

        self._store = store
        self._branches = branches
        self._active = active
        head = store.find(head_id)
        self.working.replace(head.data if head is not None else {})

    def refresh(self) -> None:
        """Reload everything from persistence and discard working edits."""
        self._load()

    # -- State --

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def active_branch(self) -> str:
        return self._active

    @property
    def branches(self) -> dict[str, str | None]:
        """Branch name -> head Version id (None for branches without commits)."""
        return dict(self._branches)

    def list_branches(self) -> list[str]:
        return list(self._branches)

    def branch(self, name: str) -> Branch:
        if name not in self._branches:
            raise NotFoundError("branch", name)
        return Branch(name=name, head=self._branches[name])

    @property
    def head(self) -> Version | None:
        """The active branch's head Version."""
        return self._head_of(self._active)

    current_version = head

    def _head_of(self, name: str) -> Version | None:
        head_id = self._branches[name]
        if head_id is None:
            return None
        version = self._store.find(head_id)
        if version is None:
            raise IntegrityError(f"Branch {name!r} points at missing version {head_id}")
        return version

    def get_version(self, version_id: str) -> Version:
        return self._store.get(version_id)

    def versions(self) -> list[Version]:
        """All Versions, newest first."""
        return sorted(self._store, key=lambda v: v.timestamp, reverse=True)

    @property
    def version_count(self) -> int:
        return len(self._store)

    @property
    def can_commit(self) -> bool:
        """Whether the working data differs from the active head."""
        return self.working.has_changes(self.head)

    def history(self, branch: str | None = None) -> list[Version]:
        """Primary chain of a branch (default: active), oldest first."""
        name = branch or self._active
        if name not in self._branches:
            raise NotFoundError("branch", name)
        head_id = self._branches[name]
        if head_id is None:
            return []
        return self._store.chain(head_id)

    def branch_info(self) -> dict[str, BranchInfo]:
        info: dict[str, BranchInfo] = {}
        for name in self._branches:
            head = self._head_of(name)
            info[name] = BranchInfo(
                name=name,
                head=head,
                version_count=len(self._store.chain(head.id)) if head else 0,
                active=name == self._active,
            )
        return info

    # -- Merge function registry --

    def set_merge_fn(self, key: str, fn: MergeFn) -> None:
        """Register a merge function for a specific key."""
        self._merge_fns[key] = fn

    def set_default_merge(self, fn: MergeFn | None) -> None:
        """Register a merge function for keys without their own."""
        self._default_merge = fn

    # -- Internal --

    def _save(
        self,
        versions: Iterable[Version],
        branches: Mapping[str, str | None],
        active: str,
    ) -> None:
        versions = list(versions)
        branches = dict(branches)
        save_state = getattr(self.persistence, "save_state", None)
        if save_state is not None:
            save_state(versions, branches, active)
            return
        # Versions first so a saved branch never points at an unsaved Version
        self.persistence.save_versions(versions)
        self.persistence.save_branches(branches)
        self.persistence.save_active_branch(active)

    def _check_new_branch_name(self, name: Any) -> str:
        if isinstance(name, str):
            name = name.strip()
        if not name:
            raise ValidationError("Branch name is required")
        if not is_valid_branch_name(name):
            raise ValidationError(
                f"Invalid branch name {name!r}: must start with a letter and "
                "contain only letters, numbers, hyphens and underscores"
            )
        if name in self._branches:
            raise ValidationError(f"Branch {name!r} already exists")
        return name

    # -- Commits --

    def commit(
        self,
        message: str,
        author: str | None = None,
        *,
        data: Mapping[str, Any] | None = None,
        allow_empty: bool = False,
    ) -> Version:
        """Commit the working data (or ``data``) to the active branch.

        Args:
            message: Commit message; must not be blank.
            author: Defaults to the repository's author.
            data: Document to commit instead of the working data. The
                working data is replaced by it on success.
            allow_empty: Commit even if nothing differs from the head.

        Raises:
            ValidationError: Blank message, or nothing to commit.
        """
        document = data if data is not None else self.working
        head = self.head
        version = self._store.build(
            document, head.id if head else None, message, author or self.author
        )
        if not allow_empty and not has_changes(document, head):
            raise ValidationError("Nothing to commit")

        branches = {**self._branches, self._active: version.id}
        self._save([*self._store, version], branches, self._active)

        self._store.append(version)
        self._branches = branches
        if data is not None:
            self.working.replace(version.data)
        logger.debug("Committed %s on %s", version.id, self._active)
        return version

    def restore(self, version_id: str) -> None:
        """Load a Version's data into the working data without committing."""
        version = self._store.get(version_id)
        self.working.replace(version.data)

    def diff(self, version_id_a: str, version_id_b: str) -> DiffResult:
        """Diff two stored Versions (a = before, b = after)."""
        return diff(self._store.get(version_id_a), self._store.get(version_id_b))

    # -- Branches --

    def create_branch(self, name: str, from_version_id: str | None = None) -> Branch:
        """Create a branch at a Version (default: the active head) and switch to it.

        Raises:
            ValidationError: Malformed or duplicate name, or no Version
                to branch from.
            NotFoundError: ``from_version_id`` does not resolve.
        """
        name = self._check_new_branch_name(name)
        version_id = from_version_id
        if version_id is None:
            head = self.head
            if head is None:
                raise ValidationError("No version to branch from")
            version_id = head.id
        version = self._store.get(version_id)

        branches = {**self._branches, name: version.id}
        self._save(self._store, branches, name)

        self._branches = branches
        self._active = name
        self.working.replace(version.data)
        logger.debug("Created branch %s at %s", name, version.id)
        return Branch(name=name, head=version.id)

    def switch_branch(self, name: str) -> None:
        """Make ``name`` the active branch and load its head into the working data."""
        if name not in self._branches:
            raise NotFoundError("branch", name)
        head = self._head_of(name)
        self.persistence.save_active_branch(name)

        self._active = name
        self.working.replace(head.data if head is not None else {})
        logger.debug("Switched to branch %s", name)

    def delete_branch(self, name: str) -> None:
        """Delete a branch pointer. Versions are left alone.

        Raises:
            ValidationError: ``name`` is ``main`` or the active branch.
            NotFoundError: ``name`` is unknown.
        """
        if name == MAIN_BRANCH:
            raise ValidationError("Cannot delete the main branch")
        if name == self._active:
            raise ValidationError("Cannot delete the currently active branch")
        if name not in self._branches:
            raise NotFoundError("branch", name)

        branches = {k: v for k, v in self._branches.items() if k != name}
        self.persistence.save_branches(branches)
        self._branches = branches
        logger.debug("Deleted branch %s", name)

    # -- Merging --

    def merge(
        self,
        source_branch: str,
        target_branch: str | None = None,
        *,
        merge_fns: Mapping[str, MergeFn] | None = None,
        default_merge: MergeFn | None = None,
    ) -> BranchMerge:
        """Compute the merge of ``source_branch`` into ``target_branch``.

        Nothing is committed. With conflicts the result has
        ``success=False``; resolve them and pass the merged data to
        ``complete_merge()``.

        Args:
            source_branch: Branch being merged in (side A).
            target_branch: Branch receiving the merge (side B,
                default: the active branch).
            merge_fns: Per-key merge functions (override registered ones).
            default_merge: Default merge function (overrides registered one).

        Raises:
            NotFoundError: Unknown branch.
            ValidationError: A branch has no commits, or source and
                target are the same branch.
        """
        target_branch = target_branch or self._active
        for name in (source_branch, target_branch):
            if name not in self._branches:
                raise NotFoundError("branch", name)
        if source_branch == target_branch:
            raise ValidationError("Cannot merge a branch into itself")

        source = self._head_of(source_branch)
        target = self._head_of(target_branch)
        if source is None or target is None:
            raise ValidationError("One or both branches do not have any commits")

        base = common_ancestor(source, target, self._store)
        effective_fns = dict(self._merge_fns)
        if merge_fns:
            effective_fns.update(merge_fns)

        result = three_way_merge(
            base,
            source,
            target,
            merge_fns=effective_fns,
            default_merge=default_merge or self._default_merge,
        )
        logger.info(
            "Merged %s into %s (base=%s): %d conflict(s)",
            source_branch,
            target_branch,
            base.id if base else None,
            len(result.conflicts),
        )
        return BranchMerge(
            source_branch=source_branch,
            target_branch=target_branch,
            source_version=source,
            target_version=target,
            base=base,
            result=result,
        )

    def complete_merge(
        self,
        merged_data: Mapping[str, Any],
        source_branch: str,
        source_version_id: str,
        message: str | None = None,
        author: str | None = None,
        *,
        target_branch: str | None = None,
    ) -> Version:
        """Record a merge-commit and advance the target branch.

        The new Version's primary parent is the target branch's head and
        its merge parent is ``source_version_id``.

        Args:
            merged_data: The fully resolved document.
            source_branch: Name of the merged-in branch (for the message).
            source_version_id: Source head the merge was computed from.
            message: Defaults to ``"Merge <source> into <target>"``.
            author: Defaults to the repository's author.
            target_branch: Defaults to the active branch.
        """
        target_branch = target_branch or self._active
        if target_branch not in self._branches:
            raise NotFoundError("branch", target_branch)
        target = self._head_of(target_branch)

        version = self._store.build(
            merged_data,
            target.id if target else None,
            message or f"Merge {source_branch} into {target_branch}",
            author or self.author,
            merge_parent_id=source_version_id,
        )
        branches = {**self._branches, target_branch: version.id}
        self._save([*self._store, version], branches, self._active)

        self._store.append(version)
        self._branches = branches
        if target_branch == self._active:
            self.working.replace(version.data)
        logger.info("Completed merge of %s into %s as %s", source_branch, target_branch, version.id)
        return version

    # -- Rollback --

    def soft_rollback(self, target_version_id: str, new_branch_name: str) -> Branch:
        """Branch off a past Version and switch to it. Nothing is deleted."""
        branch = self.create_branch(new_branch_name, target_version_id)
        logger.info("Soft rollback to %s on new branch %s", target_version_id, branch.name)
        return branch

    def hard_rollback(self, target_version_id: str) -> tuple[str, ...]:
        """Delete every Version newer than the target and rewind the active branch.

        "Newer" is decided by timestamp, not ancestry: Versions on other
        branches created after the target are deleted too, and a
        descendant carrying an older timestamp survives. Other branches
        whose head is deleted are left without commits. Irreversible.

        Returns:
            Ids of the deleted Versions.

        Raises:
            NotFoundError: Unknown target.
            IntegrityError: A surviving Version would reference a
                deleted parent (only possible with skewed timestamps).
        """
        target = self._store.get(target_version_id)
        doomed = {v.id for v in self._store.newer_than(target.timestamp)}
        survivors = [v for v in self._store if v.id not in doomed]

        for version in survivors:
            orphaned = [p for p in version.parents if p in doomed]
            if orphaned:
                raise IntegrityError(
                    f"Version {version.id} would lose parent {orphaned[0]} "
                    f"in a rollback to {target.id}"
                )

        branches: dict[str, str | None] = {}
        for name, head_id in self._branches.items():
            if name == self._active:
                branches[name] = target.id
            elif head_id in doomed:
                logger.warning("Branch %s lost its head %s in hard rollback", name, head_id)
                branches[name] = None
            else:
                branches[name] = head_id

        self._save(survivors, branches, self._active)

        for version_id in doomed:
            self._store.delete(version_id)
        self._branches = branches
        self.working.replace(target.data)
        logger.warning(
            "Hard rollback of %s to %s deleted %d version(s)",
            self._active,
            target.id,
            len(doomed),
        )
        return tuple(sorted(doomed))

    # -- Reset --

    def init_with_data(
        self,
        data: Mapping[str, Any],
        message: str = "Initial commit",
        author: str | None = None,
    ) -> Version:
        """Replace all history with a single root Version on ``main``."""
        version = self._store.build(data, None, message, author or self.author)
        branches: dict[str, str | None] = {MAIN_BRANCH: version.id}
        self._save([version], branches, MAIN_BRANCH)

        self._store = SnapshotStore([version], clock=self._clock)
        self._branches = branches
        self._active = MAIN_BRANCH
        self.working.replace(version.data)
        logger.info("Initialized repository with root %s", version.id)
        return version

    def reset_all(self) -> None:
        """Drop every Version and branch; back to an empty ``main``."""
        branches: dict[str, str | None] = {MAIN_BRANCH: None}
        self._save([], branches, MAIN_BRANCH)

        self._store = SnapshotStore(clock=self._clock)
        self._branches = branches
        self._active = MAIN_BRANCH
        self.working.replace({})
        logger.info("Reset repository")
