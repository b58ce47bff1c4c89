"""Tests for loading .git-fork-point.toml."""

from pathlib import Path

import click
import pytest

from forkpoint.cli.config import CONFIG_FILE_NAME, LoadedConfig, load_config


def test_defaults_when_file_is_absent(tmp_path: Path) -> None:
    assert load_config(tmp_path) == LoadedConfig(onto=None)


def test_reads_default_onto(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILE_NAME).write_text('onto = "develop"\n', encoding="utf-8")

    assert load_config(tmp_path) == LoadedConfig(onto="develop")


def test_ignores_unknown_keys(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILE_NAME).write_text(
        'something_else = 1\n\n[table]\nkey = "value"\n', encoding="utf-8"
    )

    assert load_config(tmp_path) == LoadedConfig(onto=None)


def test_rejects_non_string_onto(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILE_NAME).write_text("onto = 5\n", encoding="utf-8")

    with pytest.raises(click.ClickException, match="must be a branch name string, got int 5"):
        load_config(tmp_path)


def test_rejects_onto_table(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILE_NAME).write_text('[onto]\nname = "main"\n', encoding="utf-8")

    with pytest.raises(click.ClickException, match="got dict"):
        load_config(tmp_path)
