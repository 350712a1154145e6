"""Settings sources: layered YAML files and git config."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_dir
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    YamlConfigSettingsSource,
)

from linearity.core.log import logger

DEFAULTS_FILE = Path(__file__).parent.parent / "defaults" / "default.yaml"

# git config key (lowercased by git) -> (section, field)
GIT_CONFIG_KEYS = {
    "linearity.titleprefix": ("merge", "title_prefix"),
    "linearity.squash": ("merge", "squash"),
    "linearity.squashsinglecommit": ("merge", "squash_single_commit"),
    "linearity.deleteremotebranch": ("merge", "delete_remote_branch"),
    "linearity.sleepbeforedelete": ("merge", "sleep_before_delete"),
    "linearity.edit": ("merge", "edit"),
    "linearity.remote": ("git", "remote"),
    "linearity.targetbranch": ("git", "target_branch"),
}


def load_defaults() -> dict:
    """Return the parsed package defaults file."""
    with open(DEFAULTS_FILE) as f:
        return yaml.safe_load(f) or {}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into a copy of base (override wins)."""
    result = base.copy()
    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class YamlWithIncludesSettingsSource(YamlConfigSettingsSource):
    """YAML source layering several files, with include support.

    Files are deep-merged in this order, later ones winning:
    package defaults, user config, project config (./linearity.yaml),
    then any ``--include FILE`` given on the command line. Each file
    may itself name more files under an ``include:`` key.
    """

    def __init__(self, settings_cls: type[BaseSettings], yaml_file=None):
        includes = []
        args = sys.argv[1:]
        for i, arg in enumerate(args):
            if arg == "--include" and i + 1 < len(args):
                includes.append(args[i + 1])

        base = yaml_file or settings_cls.model_config.get("yaml_file")
        if base and includes:
            yaml_file = (
                [base] if isinstance(base, (str, os.PathLike)) else list(base)
            ) + includes
        elif includes:
            yaml_file = includes
        else:
            yaml_file = base

        super().__init__(settings_cls, yaml_file)

    def _read_files(self, files):
        files_to_load = [
            DEFAULTS_FILE,
            Path(user_config_dir("linearity", appauthor=False))
            / "linearity.yaml",
        ]
        if files:
            if isinstance(files, (str, os.PathLike)):
                files = [files]
            files_to_load.extend(Path(f).expanduser() for f in files)

        result = {}
        for file_path in files_to_load:
            if not file_path.is_file():
                logger.trace(
                    "Configuration file not found (skipping)",
                    file=str(file_path),
                )
                continue
            logger.debug("Loading configuration", file=str(file_path))
            data = self._load_file_recursive(file_path, set())
            result = deep_merge(result, data)
        return result

    def _load_file_recursive(self, filepath: Path, visited: set[Path]) -> dict:
        """Load one file, resolving its include: entries first.

        Raises:
            ValueError: On an include cycle
        """
        if filepath in visited:
            raise ValueError(f"Circular include: {filepath}")
        visited.add(filepath)

        with open(filepath) as f:
            data = yaml.safe_load(f) or {}

        includes = data.pop("include", None) or []
        if isinstance(includes, str):
            includes = [includes]
        for inc in includes:
            inc_path = Path(inc)
            if not inc_path.is_absolute():
                inc_path = (filepath.parent / inc_path).resolve()
            included = self._load_file_recursive(inc_path, visited.copy())
            data = deep_merge(included, data)

        return data


class GitConfigSettingsSource(PydanticBaseSettingsSource):
    """Read ``linearity.*`` keys from git config.

    git already layers repository-local config over global config, so
    the values seen here are the resolved ones. Outside a repository,
    or without git installed, the source contributes nothing.

    git runs in ``config.git.workdir`` when a higher-priority source
    (CLI, constructor, environment) sets it. A workdir from YAML ranks
    below this source and is not seen.
    """

    def __init__(self, settings_cls: type[BaseSettings], cwd: Path | None = None):
        super().__init__(settings_cls)
        self.cwd = cwd

    def get_field_value(self, field, field_name):  # noqa: ARG002
        # Values are produced as a whole by __call__
        return None, field_name, False

    def workdir(self) -> Path | None:
        """Repository to read, from the values resolved so far."""
        config = self.current_state.get("config")
        if isinstance(config, dict):
            git = config.get("git")
        else:
            git = getattr(config, "git", None)
        if isinstance(git, dict):
            workdir = git.get("workdir")
        else:
            workdir = getattr(git, "workdir", None)
        return Path(workdir) if workdir else self.cwd

    def read_git_config(self, cwd: Path | None) -> str:
        from linearity.core.runner import Runner

        try:
            result = Runner().execute(
                r"git config --get-regexp '^linearity\.'",
                cwd=cwd,
                check=False,
            )
        except OSError:
            return ""
        return result.stdout if result.exited == 0 else ""

    def __call__(self) -> dict[str, Any]:
        config: dict[str, Any] = {}
        for line in self.read_git_config(self.workdir()).splitlines():
            key, _, value = line.partition(" ")
            target = GIT_CONFIG_KEYS.get(key.lower())
            if target is None:
                continue
            section, field = target
            config.setdefault(section, {})[field] = value
        return {"config": config} if config else {}
