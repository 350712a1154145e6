"""Tests for configuration models and settings sources."""

import shutil
import subprocess
import sys

import pytest
from pydantic import ValidationError

from linearity.core.config import Config, MergeSettings, State
from linearity.core.runner import format_command
from linearity.core.yaml_settings import (
    GitConfigSettingsSource,
    deep_merge,
    load_defaults,
)


@pytest.fixture
def no_git_config(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["linearity"])
    monkeypatch.setattr(
        GitConfigSettingsSource, "read_git_config", lambda self, cwd: ""
    )


def test_merge_settings_defaults():
    settings = MergeSettings()

    assert settings.title_prefix == ""
    assert settings.squash is False
    assert settings.squash_single_commit is False
    assert settings.delete_remote_branch is False
    assert settings.sleep_before_delete == 3.0


def test_merge_settings_are_frozen():
    settings = MergeSettings()
    with pytest.raises(ValidationError):
        settings.squash = True


def test_negative_sleep_rejected():
    with pytest.raises(ValidationError):
        MergeSettings(sleep_before_delete=-1)


def test_config_loads_command_templates():
    commands = Config().commands

    assert "merge_no_ff" in commands["git"]
    assert "pr_squash" in commands["gh"]


def test_state_from_defaults(no_git_config):
    state = State()

    assert state.config.git.remote == "origin"
    assert state.config.merge.diffstat_width == 72
    assert state.runtime.run.command == "update"


def test_git_config_overrides_yaml(monkeypatch, no_git_config):
    monkeypatch.setattr(
        GitConfigSettingsSource,
        "read_git_config",
        lambda self, cwd: (
            "linearity.titleprefix [core] \n"
            "linearity.squashsinglecommit true\n"
            "linearity.sleepbeforedelete 0\n"
            "linearity.unknown ignored\n"
            "user.name Someone\n"
        ),
    )

    merge = State().config.merge

    assert merge.title_prefix == "[core] "
    assert merge.squash_single_commit is True
    assert merge.sleep_before_delete == 0


def test_environment_overrides(monkeypatch, no_git_config):
    monkeypatch.setenv("LINEARITY_CONFIG__MERGE__SQUASH", "true")

    assert State().config.merge.squash is True


def test_git_config_read_from_configured_workdir(
    monkeypatch, tmp_path, no_git_config
):
    seen = []
    monkeypatch.setattr(
        GitConfigSettingsSource,
        "read_git_config",
        lambda self, cwd: seen.append(cwd) or "",
    )
    monkeypatch.setenv("LINEARITY_CONFIG__GIT__WORKDIR", str(tmp_path))

    State()

    assert seen == [tmp_path]


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_git_config_of_other_repository(monkeypatch, tmp_path):
    """Keys set in the workdir repository apply from any cwd."""
    monkeypatch.setattr(sys, "argv", ["linearity"])
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(tmp_path / "gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    work = tmp_path / "work"
    subprocess.run(["git", "init", "-q", str(work)], check=True)
    subprocess.run(
        ["git", "config", "linearity.titlePrefix", "[core]"],
        cwd=work,
        check=True,
    )
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)
    monkeypatch.setenv("LINEARITY_CONFIG__GIT__WORKDIR", str(work))

    assert State().config.merge.title_prefix == "[core]"


def test_deep_merge_keeps_unrelated_keys():
    base = {"a": {"b": 1, "c": 2}, "d": 3}
    result = deep_merge(base, {"a": {"c": 5}})

    assert result == {"a": {"b": 1, "c": 5}, "d": 3}
    assert base["a"]["c"] == 2


def test_defaults_file_parses():
    assert load_defaults()["config"]["merge"]["squash"] is False


def test_format_command_quotes_values():
    assert format_command("git checkout {ref}", ref="a b") == (
        "git checkout 'a b'"
    )
    assert format_command("git log {range}", range=None) == "git log "
