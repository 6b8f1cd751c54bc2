from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from submodule_builder.config import ProjectConfig
from submodule_builder.git import GitError, SubmoduleLink, read_gitmodules
from submodule_builder.hosting import HostingError, HostingProvider, HostingStatus
from submodule_builder.prompts import Prompter


class ScriptedPrompter(Prompter):
    """
    Answers prompts from a mapping of prompt prefix -> answer.

    An answer may be a list, consumed one item per matching prompt. Unmatched
    prompts get their default (ask) or "no" (confirm).
    """

    def __init__(self, answers: dict[str, object] | None = None) -> None:
        self.answers = dict(answers or {})
        self.asked: list[str] = []
        self.pauses: list[str] = []

    def _answer(self, prompt: str) -> object | None:
        self.asked.append(prompt)
        for prefix, value in self.answers.items():
            if prompt.startswith(prefix):
                if isinstance(value, list):
                    return value.pop(0) if value else None
                return value
        return None

    def ask(self, prompt: str, default: str | None = None) -> str:
        value = self._answer(prompt)
        if value is None or value == "":
            return default or ""
        return str(value).strip()

    def confirm(self, prompt: str) -> bool:
        return bool(self._answer(prompt))

    def pause(self, prompt: str = "Press Enter to continue...") -> None:
        self.pauses.append(prompt)


class FakeHost(HostingProvider):
    name = "fake"

    def __init__(self, *, available: bool = True, existing: set[str] | None = None, failing: set[str] | None = None):
        self.available = available
        self.existing = set(existing or ())
        self.failing = set(failing or ())
        self.created: list[tuple[str, str, bool]] = []

    def check(self) -> HostingStatus:
        if not self.available:
            return HostingStatus(False, "Fake host is not available.")
        return HostingStatus(True, "Fake host is available")

    def repo_exists(self, full_name: str) -> bool:
        return full_name in self.existing

    def create_repo(self, full_name: str, *, description: str, private: bool) -> None:
        if full_name in self.failing:
            raise HostingError(f"Failed to create GitHub repository: {full_name}")
        self.created.append((full_name, description, private))
        self.existing.add(full_name)


class FakeGitWorld:
    """Shared state for every `FakeGitRepo`, keyed by resolved path."""

    def __init__(self) -> None:
        self.repos: dict[Path, FakeGitRepo] = {}
        self.log: list[tuple[str, ...]] = []
        self.failing_pulls: set[str] = set()
        self.failing_clones: set[str] = set()

    def open(self, path: str | Path) -> FakeGitRepo:
        key = Path(path).resolve()
        if key not in self.repos:
            self.repos[key] = FakeGitRepo(self, key)
        return self.repos[key]

    def commands(self, verb: str) -> list[tuple[str, ...]]:
        return [c for c in self.log if c[1] == verb]


class FakeGitRepo:
    def __init__(self, world: FakeGitWorld, path: Path) -> None:
        self.world = world
        self.path = path
        self.branch = "main"
        self.remotes: dict[str, str] = {}
        self.commits: list[str] = []
        self.staged = False

    def _record(self, verb: str, *args: str) -> None:
        self.world.log.append((str(self.path), verb, *args))

    def is_repo(self) -> bool:
        return (self.path / ".git").exists()

    def init(self, branch: str = "main") -> None:
        (self.path / ".git").mkdir(parents=True, exist_ok=True)
        self.branch = branch
        self._record("init", branch)

    def current_branch(self) -> str | None:
        return self.branch

    def switch_branch(self, branch: str) -> None:
        self.branch = branch

    def has_staged_changes(self) -> bool:
        return self.staged

    def add(self, *paths: str) -> None:
        self._record("add", *paths)
        self.staged = True

    def add_all(self) -> None:
        self._record("add", "-A")
        self.staged = True

    def commit(self, message: str) -> None:
        if not self.staged:
            raise GitError("nothing to commit")
        self._record("commit", message)
        self.commits.append(message)
        self.staged = False

    def get_remote_url(self, name: str = "origin") -> str | None:
        return self.remotes.get(name)

    def set_remote(self, name: str, url: str) -> None:
        self.remotes[name] = url

    def push(self, remote: str, branch: str, *, set_upstream: bool = False) -> None:
        self._record("push", remote, branch)

    def pull(self, remote: str, branch: str) -> None:
        if self.path.name in self.world.failing_pulls:
            raise GitError(f"Command failed: git pull {remote} {branch}")
        self._record("pull", remote, branch)

    def clone_to(self, destination: str | Path) -> FakeGitRepo:
        dest = Path(destination)
        if dest.name in self.world.failing_clones:
            raise GitError(f"Command failed: git clone {self.path} {dest}")
        shutil.copytree(self.path, dest)
        clone = self.world.open(dest)
        clone.commits = list(self.commits)
        clone.remotes = {"origin": str(self.path)}
        return clone

    def submodule_add(self, url: str, path: str, *, branch: str | None = None) -> None:
        self._record("submodule-add", url, path)
        with (self.path / ".gitmodules").open("a", encoding="utf-8") as fh:
            fh.write(f'[submodule "{path}"]\n\tpath = {path}\n\turl = {url}\n')
            if branch:
                fh.write(f"\tbranch = {branch}\n")
        self.staged = True

    def submodule_absorb(self, path: str) -> None:
        self._record("absorb", path)

    def submodule_update(self) -> None:
        self._record("submodule-update")

    def submodules(self) -> list[SubmoduleLink]:
        return read_gitmodules(self.path)

    def open_submodule(self, link: SubmoduleLink) -> FakeGitRepo:
        return self.world.open(self.path / link.path)

    def status_short(self) -> str:
        return " M README.md\n"

    def submodule_status(self) -> str:
        return "\n".join(f" 0000000 {link.path} (heads/main)" for link in self.submodules()) + "\n"


@pytest.fixture
def world() -> FakeGitWorld:
    return FakeGitWorld()


@pytest.fixture
def project(tmp_path: Path) -> ProjectConfig:
    root = tmp_path / "parent"
    (root / ".git").mkdir(parents=True)
    (root / "services").mkdir()
    return ProjectConfig(root=root, parent_name="business-services", owner="acme")


@pytest.fixture
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate real git invocations from the user's configuration."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.invalid")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.invalid")
