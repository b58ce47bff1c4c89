"""Helpers for integration tests that run the real git executable."""

import subprocess
from pathlib import Path


def run_git(repo: Path, *args: str) -> str:
    """Run git in repo and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def init_git_repo(repo: Path, branch: str) -> None:
    """Initialize an empty repository whose HEAD is the unborn branch `branch`."""
    run_git(repo, "init", "--quiet")
    run_git(repo, "symbolic-ref", "HEAD", f"refs/heads/{branch}")
    run_git(repo, "config", "user.name", "Test User")
    run_git(repo, "config", "user.email", "test@example.com")
    run_git(repo, "config", "commit.gpgsign", "false")


def git_commit(repo: Path, name: str) -> str:
    """Commit a new file called `name` with message `name`; return the commit id."""
    (repo / name).write_text(f"{name}\n", encoding="utf-8")
    run_git(repo, "add", name)
    run_git(repo, "commit", "--quiet", "-m", name)
    return run_git(repo, "rev-parse", "HEAD")


def git_commit_raw(repo: Path, message: bytes, *config: str) -> str:
    """Create an empty commit whose message is exactly `message`; return the commit id.

    Extra `config` entries are passed as `git -c` settings, e.g.
    "i18n.commitEncoding=latin1".
    """
    message_file = repo.parent / "commit-message.bin"
    message_file.write_bytes(message)
    settings = [arg for entry in config for arg in ("-c", entry)]
    subprocess.run(
        [
            "git",
            *settings,
            "commit",
            "--quiet",
            "--allow-empty",
            "--cleanup=verbatim",
            "-F",
            str(message_file),
        ],
        cwd=repo,
        capture_output=True,
        check=True,
    )
    message_file.unlink()
    return run_git(repo, "rev-parse", "HEAD")
