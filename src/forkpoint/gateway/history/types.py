"""Value types and discriminated-union results for the history gateway.

BranchNotFound, UnbornBranch and DetachedHead follow the NonIdealState pattern:
gateway queries return them instead of raising when the condition is an
expected outcome of user input rather than a failure of git itself.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType

CommitId = NewType("CommitId", str)


class WalkOrder(Enum):
    """Order in which a history walk yields commits."""

    NEWEST_FIRST = "newest-first"
    OLDEST_FIRST = "oldest-first"


@dataclass(frozen=True)
class Identity:
    """Author identity of a commit. Name and email are compared verbatim."""

    name: str
    email: str


@dataclass(frozen=True)
class CommitMetadata:
    """The parts of a commit object the fork-point search reads.

    Attributes:
        author: Who authored the change
        message: Raw commit message, including any trailing newline
        parents: Parent commit ids in the order recorded in the commit
    """

    author: Identity
    message: str
    parents: tuple[CommitId, ...]

    def matches(self, other: "CommitMetadata") -> bool:
        """Return True if both commits carry the same author and message.

        A rebase keeps these two fields while changing parents and therefore
        the commit id, so this is how a replayed commit is recognised.
        """
        return self.author == other.author and self.message == other.message


@dataclass(frozen=True)
class BranchNotFound:
    """Error: no local branch with this name. Implements NonIdealState."""

    branch_name: str

    @property
    def message(self) -> str:
        return f"branch '{self.branch_name}' does not exist"

    @property
    def error_type(self) -> str:
        return "branch-not-found"


@dataclass(frozen=True)
class UnbornBranch:
    """Error: HEAD names a branch that has no commits yet. Implements NonIdealState."""

    @property
    def message(self) -> str:
        return "HEAD is an unborn branch"

    @property
    def error_type(self) -> str:
        return "unborn-branch"


@dataclass(frozen=True)
class DetachedHead:
    """Error: HEAD points directly at a commit. Implements NonIdealState."""

    @property
    def message(self) -> str:
        return "HEAD is not a branch"

    @property
    def error_type(self) -> str:
        return "detached-head"
