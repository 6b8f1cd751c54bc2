"""
hosting.py

Responsibility: remote repository provisioning on a hosting provider.

Providers answer three questions: is the provider usable right now (installed
and authenticated), does a repository exist, and create one. Failures surface
as `HostingError`; callers downgrade them to warnings so local work always
proceeds.

Providers:
- `GhCliHost`: the GitHub CLI (`gh`).
- `GitHubApiHost`: the GitHub REST API via `GitHubClient`, keyed by `GITHUB_TOKEN`.
- `NullHost`: never available; everything falls back to manual instructions.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass

from submodule_builder.github_client import GitHubClient, GitHubError

log = logging.getLogger(__name__)

MANUAL_CREATE_URL = "https://github.com/new"


class HostingError(RuntimeError):
    pass


@dataclass(frozen=True)
class HostingStatus:
    available: bool
    message: str


class HostingProvider(ABC):
    name: str = "hosting"

    @abstractmethod
    def check(self) -> HostingStatus:
        """Report whether the provider is installed and authenticated."""

    @abstractmethod
    def repo_exists(self, full_name: str) -> bool: ...

    @abstractmethod
    def create_repo(self, full_name: str, *, description: str, private: bool) -> None: ...


class NullHost(HostingProvider):
    name = "none"

    def check(self) -> HostingStatus:
        return HostingStatus(False, "No hosting provider configured. You'll need to create repositories manually.")

    def repo_exists(self, full_name: str) -> bool:
        return False

    def create_repo(self, full_name: str, *, description: str, private: bool) -> None:
        raise HostingError(f"Cannot create {full_name}: no hosting provider configured")


class GhCliHost(HostingProvider):
    name = "gh"

    def __init__(self, executable: str = "gh") -> None:
        self._executable = executable

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        cmd = [self._executable, *args]
        log.debug("running %s", " ".join(cmd))
        return subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)

    def check(self) -> HostingStatus:
        if shutil.which(self._executable) is None:
            return HostingStatus(False, "GitHub CLI is not installed. You'll need to create repositories manually.")
        if self._run("auth", "status").returncode != 0:
            return HostingStatus(False, "GitHub CLI is not authenticated. Please run 'gh auth login' first.")
        return HostingStatus(True, "GitHub CLI is available and authenticated")

    def repo_exists(self, full_name: str) -> bool:
        return self._run("repo", "view", full_name).returncode == 0

    def create_repo(self, full_name: str, *, description: str, private: bool) -> None:
        privacy_flag = "--private" if private else "--public"
        proc = self._run("repo", "create", full_name, "--description", description, privacy_flag)
        if proc.returncode != 0:
            raise HostingError(f"Failed to create GitHub repository: {full_name}\n\n{proc.stdout}")


class GitHubApiHost(HostingProvider):
    name = "api"

    def __init__(self, token: str | None, api_base: str = "https://api.github.com") -> None:
        self._token = (token or "").strip()
        self._api_base = api_base
        self._client: GitHubClient | None = None

    def _gh(self) -> GitHubClient:
        if self._client is None:
            self._client = GitHubClient(self._token, self._api_base)
        return self._client

    def check(self) -> HostingStatus:
        if not self._token:
            return HostingStatus(False, "GITHUB_TOKEN is not set. You'll need to create repositories manually.")
        try:
            login = self._gh().viewer_login()
        except GitHubError as e:
            log.warning("GitHub token check failed: %s", e)
            return HostingStatus(False, f"GitHub token was rejected: {e}")
        return HostingStatus(True, f"GitHub API is available and authenticated as {login}")

    def repo_exists(self, full_name: str) -> bool:
        try:
            return self._gh().get_repo(full_name) is not None
        except GitHubError as e:
            raise HostingError(str(e)) from e

    def create_repo(self, full_name: str, *, description: str, private: bool) -> None:
        try:
            self._gh().create_repo(full_name, private=private, description=description)
        except GitHubError as e:
            raise HostingError(f"Failed to create GitHub repository: {full_name}\n\n{e}") from e


def detect_hosting(mode: str = "auto", env: Mapping[str, str] | None = None) -> HostingProvider:
    """
    Pick a provider for `mode` (auto, gh, api, none).

    `auto` prefers the GitHub CLI when installed, then the REST API when a token
    is set, and otherwise keeps the CLI so its "not installed" message is shown.
    """
    env = os.environ if env is None else env
    token = env.get("GITHUB_TOKEN") or env.get("GH_TOKEN")

    if mode == "none":
        return NullHost()
    if mode == "api":
        return GitHubApiHost(token)
    if mode == "gh":
        return GhCliHost()
    if mode != "auto":
        raise ValueError(f"Unknown hosting mode: {mode}")

    if shutil.which("gh") is None and token:
        return GitHubApiHost(token)
    return GhCliHost()
