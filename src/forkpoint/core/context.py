"""Context holding the dependencies of a git-fork-point run."""

from dataclasses import dataclass
from pathlib import Path

from forkpoint.cli.config import LoadedConfig, load_config
from forkpoint.cli.constants import EXIT_NOT_A_REPOSITORY
from forkpoint.gateway.history.abc import HistoryRepository
from forkpoint.gateway.history.fake import FakeHistoryRepository
from forkpoint.gateway.history.real import RealHistoryRepository, discover_repo_root
from forkpoint.output import user_output


@dataclass(frozen=True)
class ForkPointContext:
    """Immutable context holding all dependencies for one command run.

    Created at the CLI entry point and passed through Click's context object.
    The history gateway is bound to a single repository; nothing else holds a
    repository handle.
    """

    history: HistoryRepository
    config: LoadedConfig
    cwd: Path
    debug: bool

    @staticmethod
    def for_test(
        history: HistoryRepository | None = None,
        config: LoadedConfig | None = None,
        cwd: Path | None = None,
        debug: bool = False,
    ) -> "ForkPointContext":
        """Create test context with sensible defaults for unspecified values.

        Args:
            history: History gateway. If None, creates an empty FakeHistoryRepository.
            config: Loaded config. If None, uses defaults.
            cwd: Working directory. If None, uses /test/repo.
            debug: Debug flag

        Example:
            >>> history = FakeHistoryRepository(branches={"main": CommitId("a")}, ...)
            >>> ctx = ForkPointContext.for_test(history=history)
            >>> result = CliRunner().invoke(cli, ["main"], obj=ctx)
        """
        return ForkPointContext(
            history=history if history is not None else FakeHistoryRepository(),
            config=config if config is not None else LoadedConfig(onto=None),
            cwd=cwd if cwd is not None else Path("/test/repo"),
            debug=debug,
        )


def create_context(*, cwd: Path, debug: bool) -> ForkPointContext:
    """Create production context with real implementations.

    Exits with EXIT_NOT_A_REPOSITORY if cwd is not inside a git work tree.

    Args:
        cwd: Directory to run in
        debug: Whether debug logging was requested
    """
    repo_root = discover_repo_root(cwd)
    if repo_root is None:
        user_output(f"not a git repository: {cwd}")
        raise SystemExit(EXIT_NOT_A_REPOSITORY)

    return ForkPointContext(
        history=RealHistoryRepository(repo_root),
        config=load_config(repo_root),
        cwd=cwd,
        debug=debug,
    )
