"""Fork-point resolution for branches stacked on a rewritten branch.

When a branch B2 is built on B1 and B1 is later rebased, the commits B2 shares
with the old B1 are no longer ancestors of B1, so `git merge-base` points too
far back. A rebase keeps each commit's author and message, so the old commits
can still be recognised on the new B1 by that signature.

The search runs in two phases over two oldest-first walks:

1. Anchor search: the oldest commit unique to `branch` is looked up among the
   commits unique to `onto`. Unrelated commits in between are skipped.
2. Lockstep extension: from the anchor on, the two walks are advanced
   together for as long as each pair of commits matches.

The answer is always a branch-side commit id, since those are the commits
reachable from the branch being replayed.
"""

import logging
from collections.abc import Iterator

from forkpoint.core.types import ForkPointInvariantViolated, ForkPointResolved
from forkpoint.gateway.history.abc import HistoryRepository
from forkpoint.gateway.history.types import CommitId, CommitMetadata, WalkOrder

logger = logging.getLogger(__name__)


def _find_anchor(
    history: HistoryRepository,
    target: CommitMetadata,
    walk_onto: Iterator[CommitId],
) -> CommitId | None:
    """Advance walk_onto up to and including the first commit matching target."""
    for onto_commit in walk_onto:
        if history.get_metadata(onto_commit).matches(target):
            return onto_commit
    return None


def resolve_fork_point(
    history: HistoryRepository,
    *,
    branch: CommitId,
    onto: CommitId,
) -> ForkPointResolved | ForkPointInvariantViolated:
    """Find the commit on branch that corresponds to where it left onto.

    Args:
        history: Repository to query
        branch: Tip of the branch to be replayed
        onto: Tip of the branch it will be replayed onto

    Returns:
        ForkPointResolved with the fork point, or ForkPointInvariantViolated
        if branch has no commits of its own yet shares no history with onto

    Raises:
        Whatever the history backend raises when a query fails
    """
    merge_base = history.get_merge_base(onto, branch)
    logger.debug("merge base of %s and %s: %s", onto, branch, merge_base)

    walk_branch = history.walk([branch], [onto], WalkOrder.OLDEST_FIRST)
    walk_onto = history.walk([onto], [branch], WalkOrder.OLDEST_FIRST)

    result = merge_base if merge_base is not None else onto

    first = next(walk_branch, None)
    if first is None:
        if merge_base is None:
            return ForkPointInvariantViolated(
                message=(
                    f"{branch} has no commits outside {onto} "
                    "but the two share no common ancestor"
                )
            )
        logger.debug("%s is contained in %s", branch, onto)
        return ForkPointResolved(commit=result, merge_base=merge_base, anchor=None, matched_count=0)

    match = _find_anchor(history, history.get_metadata(first), walk_onto)
    if match is None:
        logger.debug("no counterpart for %s on %s, falling back to %s", first, onto, result)
        return ForkPointResolved(commit=result, merge_base=merge_base, anchor=None, matched_count=0)

    logger.debug("anchor %s matches %s", first, match)
    result = first
    matched_count = 1

    # zip stops at the shorter walk
    for branch_commit, onto_commit in zip(walk_branch, walk_onto):
        if not history.get_metadata(branch_commit).matches(history.get_metadata(onto_commit)):
            logger.debug("histories diverge at %s / %s", branch_commit, onto_commit)
            break
        result = branch_commit
        matched_count += 1

    logger.debug("fork point: %s (%d matched)", result, matched_count)
    return ForkPointResolved(
        commit=result,
        merge_base=merge_base,
        anchor=first,
        matched_count=matched_count,
    )
