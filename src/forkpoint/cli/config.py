import tomllib
from dataclasses import dataclass
from pathlib import Path

import click

CONFIG_FILE_NAME = ".git-fork-point.toml"


@dataclass(frozen=True)
class LoadedConfig:
    """In-memory representation of `.git-fork-point.toml`.

    Example:
      # Base branch used when none is given on the command line
      onto = "main"
    """

    onto: str | None


def load_config(repo_root: Path) -> LoadedConfig:
    """Load the config file from the repository root if present; otherwise return defaults.

    Raises:
        click.ClickException: If `onto` is present but not a string
    """
    cfg_path = repo_root / CONFIG_FILE_NAME
    if not cfg_path.exists():
        return LoadedConfig(onto=None)

    data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    onto = data.get("onto")
    if onto is not None and not isinstance(onto, str):
        raise click.ClickException(
            f"{cfg_path}: 'onto' must be a branch name string, got {type(onto).__name__} {onto!r}"
        )
    return LoadedConfig(onto=onto)
