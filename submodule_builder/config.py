"""
config.py

Responsibility: settings and session configuration.

- `Settings`: tool-wide defaults, optionally loaded from a YAML file.
- `ProjectConfig`: the session configuration produced by parent setup. It is
  held in memory only; operations that need a configured parent take one as an
  argument, so "not set up yet" is `None` at the call site rather than a set of
  empty strings.
- `ChildModule`: the transient description of one child repository.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_SETTINGS_FILE = "submodule-builder.yaml"

HOSTING_MODES = ("auto", "gh", "api", "none")


class SettingsError(ValueError):
    pass


class NotConfiguredError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    """Defaults used by prompts and operations."""

    services_dir: str = "services"
    default_submodules: tuple[str, ...] = ("website", "apps", "ai")
    primary_branch: str = "main"
    hosting: str = "auto"
    remote_base_url: str = "https://github.com"
    parent_name: str = "business-services"
    parent_description: str = "Business services with modular architecture"
    deterministic_git: bool = False
    sync_fail_fast: bool = False


@dataclass(frozen=True)
class ProjectConfig:
    """Session configuration populated by parent setup."""

    root: Path
    parent_name: str
    owner: str
    services_dir: str = "services"
    default_submodules: tuple[str, ...] = ("website", "apps", "ai")
    primary_branch: str = "main"
    remote_base_url: str = "https://github.com"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.parent_name}"

    @property
    def remote_url(self) -> str:
        return remote_url_for(self.remote_base_url, self.full_name)

    @property
    def services_path(self) -> Path:
        return self.root / self.services_dir

    def child(self, name: str, **kwargs: Any) -> ChildModule:
        return ChildModule(name=name, parent_name=self.parent_name, owner=self.owner, **kwargs)

    def submodule_path(self, name: str) -> str:
        # Always posix: this is what ends up in .gitmodules.
        return f"{self.services_dir}/{name}"


@dataclass(frozen=True)
class ChildModule:
    name: str
    parent_name: str
    owner: str
    description: str = ""
    template: str = "empty"
    private: bool = False

    @property
    def repo_name(self) -> str:
        return f"{self.parent_name}-{self.name}"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo_name}"


def remote_url_for(base_url: str, full_name: str) -> str:
    return f"{base_url.rstrip('/')}/{full_name}.git"


def _expect_str(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise SettingsError(f"`{key}` must be a non-empty string.")
    return value.strip()


def _expect_names(data: dict[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, list) or not all(isinstance(v, str) and v.strip() for v in value):
        raise SettingsError(f"`{key}` must be a list of non-empty strings.")
    names: list[str] = []
    for v in value:
        # Keep first occurrence; child names are unique within the services dir.
        if v.strip() not in names:
            names.append(v.strip())
    return tuple(names)


def settings_from_mapping(data: dict[str, Any]) -> Settings:
    """
    Build `Settings` from a parsed mapping. Unknown keys are ignored.
    """
    base = Settings()

    hosting = _expect_str(data, "hosting", base.hosting).lower()
    if hosting not in HOSTING_MODES:
        raise SettingsError(f"`hosting` must be one of: {', '.join(HOSTING_MODES)}")

    flags: dict[str, bool] = {}
    for key in ("deterministic_git", "sync_fail_fast"):
        value = data.get(key, getattr(base, key))
        if not isinstance(value, bool):
            raise SettingsError(f"`{key}` must be a boolean.")
        flags[key] = value

    services_dir = _expect_str(data, "services_dir", base.services_dir).strip("/")
    if not services_dir:
        raise SettingsError("`services_dir` must name a directory.")

    return Settings(
        services_dir=services_dir,
        default_submodules=_expect_names(data, "default_submodules", base.default_submodules),
        primary_branch=_expect_str(data, "primary_branch", base.primary_branch),
        hosting=hosting,
        remote_base_url=_expect_str(data, "remote_base_url", base.remote_base_url),
        parent_name=_expect_str(data, "parent_name", base.parent_name),
        parent_description=_expect_str(data, "parent_description", base.parent_description),
        **flags,
    )


def load_settings(path: str | Path | None = None, *, cwd: Path | None = None) -> Settings:
    """
    Load settings from a YAML file.

    With no explicit path, `submodule-builder.yaml` in `cwd` is used when it
    exists; otherwise built-in defaults are returned.
    """
    if path is None:
        candidate = (cwd or Path.cwd()) / DEFAULT_SETTINGS_FILE
        if not candidate.is_file():
            return Settings()
        path = candidate

    p = Path(path)
    if not p.is_file():
        raise SettingsError(f"Settings file does not exist: {p}")

    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in settings file {p}: {e}") from e
    if not isinstance(data, dict):
        raise SettingsError("Settings file must be a mapping/object at the top level.")
    return settings_from_mapping(data)


@dataclass
class Session:
    """Mutable per-run state owned by the menu controller."""

    settings: Settings = field(default_factory=Settings)
    project: ProjectConfig | None = None

    def require_project(self) -> ProjectConfig:
        if self.project is None:
            raise NotConfiguredError("Parent repository must be set up first. Please run option 1.")
        return self.project
