"""Abstract interface for reading commit history."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator

from forkpoint.gateway.history.types import (
    BranchNotFound,
    CommitId,
    CommitMetadata,
    DetachedHead,
    UnbornBranch,
    WalkOrder,
)


class HistoryRepository(ABC):
    """Abstract interface for read-only queries over a commit graph.

    One instance is bound to one repository. All implementations (real and
    fake) must implement this interface. This interface contains ONLY query
    operations - nothing here writes refs, the index or the working tree.
    """

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def resolve_branch(self, name: str) -> CommitId | BranchNotFound:
        """Resolve a local branch name to the commit it points at.

        Args:
            name: Short branch name, e.g. "main"

        Returns:
            The commit id, or BranchNotFound if no such local branch exists
        """
        ...

    @abstractmethod
    def get_head(self) -> CommitId | UnbornBranch | DetachedHead:
        """Resolve HEAD, which must be a branch with at least one commit.

        Returns:
            The commit id of the current branch tip, UnbornBranch if the
            current branch has no commits yet, or DetachedHead if HEAD does
            not refer to a branch
        """
        ...

    @abstractmethod
    def get_merge_base(self, a: CommitId, b: CommitId) -> CommitId | None:
        """Get the best common ancestor of two commits.

        Returns:
            The merge base, or None if the histories share no commit
        """
        ...

    @abstractmethod
    def get_metadata(self, commit: CommitId) -> CommitMetadata:
        """Read author, message and parents of a commit."""
        ...

    @abstractmethod
    def walk(
        self,
        start: Iterable[CommitId],
        exclude: Iterable[CommitId],
        order: WalkOrder,
    ) -> Iterator[CommitId]:
        """Lazily enumerate commits reachable from start but not from exclude.

        The returned iterator is one-shot. With WalkOrder.OLDEST_FIRST every
        commit is yielded after all of its parents that are part of the walk.

        Args:
            start: Commits to walk from
            exclude: Commits whose ancestry is hidden from the walk
            order: Which end of the history comes first
        """
        ...
