import logging
from pathlib import Path

import click

from forkpoint.cli.constants import (
    EXIT_BRANCH_NOT_FOUND,
    EXIT_DETACHED_HEAD,
    EXIT_INTERNAL_ERROR,
    EXIT_UNBORN_BRANCH,
)
from forkpoint.core.context import ForkPointContext, create_context
from forkpoint.core.fork_point import resolve_fork_point
from forkpoint.core.types import ForkPointInvariantViolated
from forkpoint.gateway.history.types import BranchNotFound, DetachedHead, UnbornBranch
from forkpoint.output import machine_output, user_output

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

logger = logging.getLogger(__name__)


@click.command(name="git-fork-point", context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="git-fork-point")
@click.argument("onto", required=False)
@click.option(
    "-C",
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Run as if started in this directory.",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--verbose", "-v", is_flag=True, help="Explain how the fork point was found")
@click.pass_context
def cli(
    ctx: click.Context,
    onto: str | None,
    directory: Path | None,
    debug: bool,
    verbose: bool,
) -> None:
    """Print the commit the current branch forked from ONTO.

    Unlike `git merge-base`, this still finds the right commit after ONTO has
    been rebased: commits replayed by the rebase are recognised by author and
    message. The output is meant for `git rebase --onto ONTO <fork-point>`.

    ONTO defaults to the `onto` key of .git-fork-point.toml at the repository
    root.
    """
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        cwd = directory if directory is not None else Path.cwd()
        ctx.obj = create_context(cwd=cwd, debug=debug)
    fp_ctx: ForkPointContext = ctx.obj

    if onto is None:
        onto = fp_ctx.config.onto
    if onto is None:
        raise click.UsageError("Missing argument 'ONTO' and no default set in .git-fork-point.toml")

    head = fp_ctx.history.get_head()
    if isinstance(head, UnbornBranch):
        user_output(head.message)
        raise SystemExit(EXIT_UNBORN_BRANCH)
    if isinstance(head, DetachedHead):
        user_output(head.message)
        raise SystemExit(EXIT_DETACHED_HEAD)

    onto_commit = fp_ctx.history.resolve_branch(onto)
    if isinstance(onto_commit, BranchNotFound):
        user_output(onto_commit.message)
        raise SystemExit(EXIT_BRANCH_NOT_FOUND)

    logger.debug("branch=%s onto=%s (%s)", head, onto, onto_commit)
    outcome = resolve_fork_point(fp_ctx.history, branch=head, onto=onto_commit)
    if isinstance(outcome, ForkPointInvariantViolated):
        user_output(f"internal error: {outcome.message}")
        raise SystemExit(EXIT_INTERNAL_ERROR)

    if verbose:
        user_output(f"merge base: {outcome.merge_base or '(none)'}")
        if outcome.anchor is None:
            user_output("no replayed commits found")
        else:
            user_output(f"anchor: {outcome.anchor}")
            user_output(f"replayed commits matched: {outcome.matched_count}")

    machine_output(outcome.commit)


def main() -> None:
    """CLI entry point used by the `git-fork-point` console script."""
    cli()
