"""Fake implementation of the history gateway for testing."""

from collections.abc import Iterable, Iterator

from forkpoint.gateway.history.abc import HistoryRepository
from forkpoint.gateway.history.types import (
    BranchNotFound,
    CommitId,
    CommitMetadata,
    DetachedHead,
    UnbornBranch,
    WalkOrder,
)


class FakeHistoryRepository(HistoryRepository):
    """In-memory fake implementation for testing.

    Constructor Injection: pre-configured state passed via constructor.

    The commit graph is held as a mapping of commit id -> metadata. Insertion
    order stands in for commit time, so every commit must be inserted after
    its parents. Merge bases and walks are computed from the graph rather than
    configured, which keeps test setups consistent by construction.
    """

    def __init__(
        self,
        *,
        commits: dict[CommitId, CommitMetadata] | None = None,
        branches: dict[str, CommitId] | None = None,
        head: str | None = None,
        metadata_errors: dict[CommitId, Exception] | None = None,
    ) -> None:
        """Create FakeHistoryRepository with pre-configured state.

        Args:
            commits: Mapping of commit id -> metadata, parents first
            branches: Mapping of local branch name -> tip commit
            head: Branch HEAD refers to; None means HEAD is detached, and a
                name missing from branches means the branch is unborn
            metadata_errors: Mapping of commit id -> exception raised when
                that commit's metadata is read
        """
        self._commits: dict[CommitId, CommitMetadata] = commits if commits is not None else {}
        self._branches: dict[str, CommitId] = branches if branches is not None else {}
        self._head = head
        self._metadata_errors: dict[CommitId, Exception] = (
            metadata_errors if metadata_errors is not None else {}
        )
        self._order: dict[CommitId, int] = {}
        for index, (commit, metadata) in enumerate(self._commits.items()):
            for parent in metadata.parents:
                if parent not in self._order:
                    raise ValueError(f"Parent {parent} of {commit} must be inserted before it")
            self._order[commit] = index
        self._metadata_reads: list[CommitId] = []

    # ============================================================================
    # Query Operations
    # ============================================================================

    def resolve_branch(self, name: str) -> CommitId | BranchNotFound:
        """Resolve a local branch name to the commit it points at."""
        if name not in self._branches:
            return BranchNotFound(branch_name=name)
        return self._branches[name]

    def get_head(self) -> CommitId | UnbornBranch | DetachedHead:
        """Resolve HEAD, which must be a branch with at least one commit."""
        if self._head is None:
            return DetachedHead()
        if self._head not in self._branches:
            return UnbornBranch()
        return self._branches[self._head]

    def get_merge_base(self, a: CommitId, b: CommitId) -> CommitId | None:
        """Get the best common ancestor of two commits.

        Among common ancestors that are not themselves ancestors of another
        common ancestor, the most recently inserted one wins.
        """
        common = self._ancestors([a]) & self._ancestors([b])
        if not common:
            return None
        hidden: set[CommitId] = set()
        for commit in common:
            parents = self._commits[commit].parents
            if parents:
                hidden |= self._ancestors(parents)
        best = common - hidden
        return max(best, key=lambda commit: self._order[commit])

    def get_metadata(self, commit: CommitId) -> CommitMetadata:
        """Read author, message and parents of a commit."""
        self._metadata_reads.append(commit)
        if commit in self._metadata_errors:
            raise self._metadata_errors[commit]
        if commit not in self._commits:
            raise KeyError(f"Unknown commit {commit}")
        return self._commits[commit]

    def walk(
        self,
        start: Iterable[CommitId],
        exclude: Iterable[CommitId],
        order: WalkOrder,
    ) -> Iterator[CommitId]:
        """Lazily enumerate commits reachable from start but not from exclude."""
        reachable = self._ancestors(start) - self._ancestors(exclude)
        ordered = sorted(
            reachable,
            key=lambda commit: self._order[commit],
            reverse=order is WalkOrder.NEWEST_FIRST,
        )
        return iter(ordered)

    # ============================================================================
    # Test Inspection
    # ============================================================================

    @property
    def metadata_reads(self) -> list[CommitId]:
        """Commits whose metadata was read, in call order."""
        return list(self._metadata_reads)

    def _ancestors(self, starts: Iterable[CommitId]) -> set[CommitId]:
        """Return every commit reachable from starts, starts included."""
        seen: set[CommitId] = set()
        stack = list(starts)
        while stack:
            commit = stack.pop()
            if commit in seen:
                continue
            if commit not in self._commits:
                raise KeyError(f"Unknown commit {commit}")
            seen.add(commit)
            stack.extend(self._commits[commit].parents)
        return seen
