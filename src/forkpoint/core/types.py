"""Outcome types for fork-point resolution.

ForkPointResolved | ForkPointInvariantViolated follows the NonIdealState
pattern used by the history gateway's BranchNotFound and friends.
"""

from dataclasses import dataclass

from forkpoint.gateway.history.types import CommitId


@dataclass(frozen=True)
class ForkPointResolved:
    """Success result from resolving a fork point.

    Attributes:
        commit: The fork point, to be passed to `git rebase --onto`
        merge_base: Common ancestor of branch and onto, or None if unrelated
        anchor: Branch-side commit the anchor search matched, or None
        matched_count: Branch-side commits with a counterpart on onto
    """

    commit: CommitId
    merge_base: CommitId | None
    anchor: CommitId | None
    matched_count: int


@dataclass(frozen=True)
class ForkPointInvariantViolated:
    """Error: the history backend contradicted itself. Implements NonIdealState."""

    message: str

    @property
    def error_type(self) -> str:
        return "invariant-violated"
