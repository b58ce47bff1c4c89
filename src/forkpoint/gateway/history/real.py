"""Real implementation of the history gateway using the git executable."""

import logging
import re
import subprocess
import tempfile
from collections.abc import Iterable, Iterator
from pathlib import Path

from forkpoint.gateway.history.abc import HistoryRepository
from forkpoint.gateway.history.types import (
    BranchNotFound,
    CommitId,
    CommitMetadata,
    DetachedHead,
    Identity,
    UnbornBranch,
    WalkOrder,
)
from forkpoint.subprocess_utils import (
    GitCommandError,
    run_subprocess_bytes_with_context,
    run_subprocess_with_context,
)

logger = logging.getLogger(__name__)

# "Name <email> 1700000000 +0000"; the name may be empty and the date is not read
_SIGNATURE_RE = re.compile(r"^(?P<name>.*?) ?<(?P<email>[^>]*)>")


def _decode(raw: bytes) -> str:
    """Decode commit bytes losslessly; undecodable bytes survive as surrogates."""
    return raw.decode("utf-8", errors="surrogateescape")


def discover_repo_root(cwd: Path) -> Path | None:
    """Find the top-level directory of the work tree containing cwd.

    Returns:
        The repository root, or None if cwd is not inside a git work tree
    """
    result = subprocess.run(
        ["git", "rev-parse", "--show-toplevel"],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        return None
    return Path(result.stdout.strip())


def parse_commit_object(commit: CommitId, raw: bytes) -> CommitMetadata:
    """Parse the output of `git cat-file commit` into CommitMetadata.

    Header lines run up to the first empty line; continuation lines (used by
    gpgsig and mergetag) start with a space. Everything after the empty line
    is the message. Messages may be in any encoding, so nothing is translated:
    two messages compare equal only if their bytes are equal.
    """
    header, sep, message = raw.partition(b"\n\n")
    if not sep:
        # A commit with no message ends right after the headers
        header = raw.rstrip(b"\n")

    parents: list[CommitId] = []
    author: Identity | None = None
    for line in header.split(b"\n"):
        if line.startswith(b" "):
            continue
        key, _, value = _decode(line).partition(" ")
        if key == "parent":
            parents.append(CommitId(value))
        elif key == "author":
            match = _SIGNATURE_RE.match(value)
            if match is None:
                raise ValueError(f"Malformed author line in commit {commit}: {value!r}")
            author = Identity(name=match.group("name"), email=match.group("email"))

    if author is None:
        raise ValueError(f"Commit {commit} has no author")

    return CommitMetadata(author=author, message=_decode(message), parents=tuple(parents))


class RealHistoryRepository(HistoryRepository):
    """Real implementation of the history gateway using subprocess."""

    def __init__(self, repo_root: Path) -> None:
        """Initialize RealHistoryRepository.

        Args:
            repo_root: Any directory inside the repository to query
        """
        self._repo_root = repo_root

    # ============================================================================
    # Query Operations
    # ============================================================================

    def resolve_branch(self, name: str) -> CommitId | BranchNotFound:
        """Resolve a local branch name to the commit it points at."""
        result = run_subprocess_with_context(
            cmd=["git", "rev-parse", "--verify", "--quiet", f"refs/heads/{name}^{{commit}}"],
            operation_context=f"resolve branch {name}",
            cwd=self._repo_root,
            allowed_returncodes=(0, 1),
        )
        if result.returncode != 0:
            return BranchNotFound(branch_name=name)
        return CommitId(result.stdout.strip())

    def get_head(self) -> CommitId | UnbornBranch | DetachedHead:
        """Resolve HEAD, which must be a branch with at least one commit."""
        symbolic = run_subprocess_with_context(
            cmd=["git", "symbolic-ref", "--quiet", "HEAD"],
            operation_context="read symbolic ref HEAD",
            cwd=self._repo_root,
            allowed_returncodes=(0, 1),
        )
        if symbolic.returncode != 0:
            return DetachedHead()

        result = run_subprocess_with_context(
            cmd=["git", "rev-parse", "--verify", "--quiet", "HEAD^{commit}"],
            operation_context="resolve HEAD",
            cwd=self._repo_root,
            allowed_returncodes=(0, 1),
        )
        if result.returncode != 0:
            return UnbornBranch()
        return CommitId(result.stdout.strip())

    def get_merge_base(self, a: CommitId, b: CommitId) -> CommitId | None:
        """Get the best common ancestor of two commits."""
        result = run_subprocess_with_context(
            cmd=["git", "merge-base", a, b],
            operation_context=f"find merge base of {a} and {b}",
            cwd=self._repo_root,
            allowed_returncodes=(0, 1),
        )
        merge_base = result.stdout.strip()
        if result.returncode != 0 or not merge_base:
            return None
        return CommitId(merge_base)

    def get_metadata(self, commit: CommitId) -> CommitMetadata:
        """Read author, message and parents of a commit."""
        result = run_subprocess_bytes_with_context(
            cmd=["git", "cat-file", "commit", commit],
            operation_context=f"read commit {commit}",
            cwd=self._repo_root,
        )
        return parse_commit_object(commit, result.stdout)

    def walk(
        self,
        start: Iterable[CommitId],
        exclude: Iterable[CommitId],
        order: WalkOrder,
    ) -> Iterator[CommitId]:
        """Lazily enumerate commits reachable from start but not from exclude."""
        starts = list(start)
        excluded = list(exclude)
        if not starts:
            return iter(())

        cmd = ["git", "rev-list", "--topo-order"]
        if order is WalkOrder.OLDEST_FIRST:
            cmd.append("--reverse")
        cmd.extend(starts)
        if excluded:
            cmd.append("--not")
            cmd.extend(excluded)
        return self._stream_commits(cmd)

    def _stream_commits(self, cmd: list[str]) -> Iterator[CommitId]:
        """Yield one commit id per line of output as the process produces it.

        The process is killed if the consumer stops early. A non-zero exit
        status is only reported once the output has been read to the end.
        stderr goes to a temporary file so that it can never fill a pipe and
        stall the process while stdout is being read.
        """
        logger.debug("Streaming %s in %s", cmd, self._repo_root)
        with tempfile.TemporaryFile() as stderr_file:
            with subprocess.Popen(
                cmd,
                cwd=self._repo_root,
                stdout=subprocess.PIPE,
                stderr=stderr_file,
                text=True,
            ) as process:
                try:
                    if process.stdout:
                        for line in process.stdout:
                            commit = line.strip()
                            if commit:
                                yield CommitId(commit)
                    returncode = process.wait()
                finally:
                    if process.poll() is None:
                        process.kill()

            if returncode != 0:
                stderr_file.seek(0)
                raise GitCommandError(
                    cmd=cmd,
                    operation_context="walk history",
                    returncode=returncode,
                    stderr=stderr_file.read().decode("utf-8", errors="replace").strip(),
                )
