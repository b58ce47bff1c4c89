"""Integration tests for RealHistoryRepository against real git repositories."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from forkpoint.core.fork_point import resolve_fork_point
from forkpoint.core.types import ForkPointResolved
from forkpoint.gateway.history.real import RealHistoryRepository, discover_repo_root
from forkpoint.gateway.history.types import (
    BranchNotFound,
    CommitId,
    DetachedHead,
    Identity,
    UnbornBranch,
    WalkOrder,
)
from forkpoint.subprocess_utils import GitCommandError
from tests.integration.conftest import git_commit, git_commit_raw, init_git_repo, run_git

MISSING = CommitId("0123456789abcdef0123456789abcdef01234567")


def _repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    init_git_repo(repo, "main")
    return repo


def _forked(tmp_path: Path) -> tuple[Path, dict[str, CommitId]]:
    """main: a-b-c-d, feature: a-b-x."""
    repo = _repo(tmp_path)
    ids: dict[str, CommitId] = {}
    for name in ("a", "b"):
        ids[name] = CommitId(git_commit(repo, name))
    run_git(repo, "checkout", "--quiet", "-b", "feature")
    ids["x"] = CommitId(git_commit(repo, "x"))
    run_git(repo, "checkout", "--quiet", "main")
    for name in ("c", "d"):
        ids[name] = CommitId(git_commit(repo, name))
    return repo, ids


def test_get_head_on_unborn_branch(tmp_path: Path) -> None:
    repo = _repo(tmp_path)

    assert isinstance(RealHistoryRepository(repo).get_head(), UnbornBranch)


def test_get_head_returns_branch_tip(tmp_path: Path) -> None:
    repo, ids = _forked(tmp_path)

    assert RealHistoryRepository(repo).get_head() == ids["d"]


def test_get_head_when_detached(tmp_path: Path) -> None:
    repo, _ = _forked(tmp_path)
    run_git(repo, "checkout", "--quiet", "--detach")

    assert isinstance(RealHistoryRepository(repo).get_head(), DetachedHead)


def test_resolve_branch(tmp_path: Path) -> None:
    repo, ids = _forked(tmp_path)
    history = RealHistoryRepository(repo)

    assert history.resolve_branch("feature") == ids["x"]
    assert history.resolve_branch("nope") == BranchNotFound(branch_name="nope")


def test_resolve_branch_ignores_tags(tmp_path: Path) -> None:
    repo, _ = _forked(tmp_path)
    run_git(repo, "tag", "v1")

    assert isinstance(RealHistoryRepository(repo).resolve_branch("v1"), BranchNotFound)


def test_get_merge_base(tmp_path: Path) -> None:
    repo, ids = _forked(tmp_path)

    assert RealHistoryRepository(repo).get_merge_base(ids["d"], ids["x"]) == ids["b"]


def test_get_merge_base_of_unrelated_histories(tmp_path: Path) -> None:
    repo, ids = _forked(tmp_path)
    run_git(repo, "checkout", "--quiet", "--orphan", "other")
    run_git(repo, "rm", "-r", "-f", "--quiet", ".")
    root = CommitId(git_commit(repo, "root"))

    assert RealHistoryRepository(repo).get_merge_base(root, ids["d"]) is None


def test_get_merge_base_with_missing_object_raises(tmp_path: Path) -> None:
    repo, ids = _forked(tmp_path)

    with pytest.raises(GitCommandError, match="find merge base"):
        RealHistoryRepository(repo).get_merge_base(MISSING, ids["d"])


def test_get_metadata(tmp_path: Path) -> None:
    repo, ids = _forked(tmp_path)

    metadata = RealHistoryRepository(repo).get_metadata(ids["x"])

    assert metadata.author == Identity(name="Test User", email="test@example.com")
    assert metadata.message == "x\n"
    assert metadata.parents == (ids["b"],)


def test_get_metadata_of_missing_commit_raises(tmp_path: Path) -> None:
    repo, _ = _forked(tmp_path)

    with pytest.raises(GitCommandError, match="read commit"):
        RealHistoryRepository(repo).get_metadata(MISSING)


def test_walk_oldest_first(tmp_path: Path) -> None:
    repo, ids = _forked(tmp_path)

    walk = RealHistoryRepository(repo).walk([ids["d"]], [ids["x"]], WalkOrder.OLDEST_FIRST)

    assert list(walk) == [ids["c"], ids["d"]]


def test_walk_newest_first(tmp_path: Path) -> None:
    repo, ids = _forked(tmp_path)

    walk = RealHistoryRepository(repo).walk([ids["x"]], [], WalkOrder.NEWEST_FIRST)

    assert list(walk) == [ids["x"], ids["b"], ids["a"]]


def test_walk_with_nothing_to_start_from_is_empty(tmp_path: Path) -> None:
    repo, ids = _forked(tmp_path)

    assert list(RealHistoryRepository(repo).walk([], [ids["d"]], WalkOrder.OLDEST_FIRST)) == []


def test_walk_can_be_abandoned_early(tmp_path: Path) -> None:
    repo, ids = _forked(tmp_path)

    walk = RealHistoryRepository(repo).walk([ids["d"]], [], WalkOrder.NEWEST_FIRST)
    assert isinstance(walk, Generator)

    assert next(walk) == ids["d"]
    walk.close()


def test_walk_from_missing_commit_raises_when_consumed(tmp_path: Path) -> None:
    repo, _ = _forked(tmp_path)

    walk = RealHistoryRepository(repo).walk([MISSING], [], WalkOrder.OLDEST_FIRST)

    with pytest.raises(GitCommandError, match="walk history") as exc_info:
        list(walk)

    assert exc_info.value.returncode != 0
    assert exc_info.value.stderr != ""


def test_discover_repo_root_from_subdirectory(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    nested = repo / "src" / "pkg"
    nested.mkdir(parents=True)

    root = discover_repo_root(nested)

    assert root is not None
    assert root.resolve() == repo.resolve()


def test_discover_repo_root_outside_repository(tmp_path: Path) -> None:
    outside = tmp_path / "plain"
    outside.mkdir()

    assert discover_repo_root(outside) is None


def _feature_from_main(repo: Path) -> None:
    git_commit(repo, "a")
    run_git(repo, "checkout", "--quiet", "-b", "feature")


def test_get_metadata_of_latin1_message(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    _feature_from_main(repo)
    commit = CommitId(git_commit_raw(repo, b"caf\xe9\n", "i18n.commitEncoding=latin1"))

    metadata = RealHistoryRepository(repo).get_metadata(commit)

    assert metadata.message.encode("utf-8", errors="surrogateescape") == b"caf\xe9\n"
    assert metadata.author == Identity(name="Test User", email="test@example.com")


def test_resolve_fork_point_over_latin1_commit(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    _feature_from_main(repo)
    feature = CommitId(git_commit_raw(repo, b"caf\xe9\n", "i18n.commitEncoding=latin1"))
    run_git(repo, "checkout", "--quiet", "main")
    base = CommitId(run_git(repo, "rev-parse", "HEAD"))
    main = CommitId(git_commit(repo, "b"))

    outcome = resolve_fork_point(RealHistoryRepository(repo), branch=feature, onto=main)

    assert isinstance(outcome, ForkPointResolved)
    assert outcome.commit == base


def test_crlf_and_lf_messages_do_not_match(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    _feature_from_main(repo)
    base = CommitId(run_git(repo, "rev-parse", "HEAD"))
    feature = CommitId(git_commit_raw(repo, b"msg\r\n"))
    run_git(repo, "checkout", "--quiet", "main")
    main = CommitId(git_commit_raw(repo, b"msg\n"))
    history = RealHistoryRepository(repo)

    crlf = history.get_metadata(feature)
    lf = history.get_metadata(main)

    assert crlf.message == "msg\r\n"
    assert lf.message == "msg\n"
    assert not crlf.matches(lf)
    outcome = resolve_fork_point(history, branch=feature, onto=main)
    assert isinstance(outcome, ForkPointResolved)
    assert outcome.commit == base
    assert outcome.anchor is None
