"""
git.py

Responsibility: every git invocation the tool makes.

`GitRepo` wraps one working tree and shells out to the `git` binary. The
orchestration modules only talk to this interface, which is small enough to be
replaced by a recording fake in tests.

Reading `.gitmodules` is done here too (`read_gitmodules`), so status display and
tests agree on what counts as a submodule link.
"""

from __future__ import annotations

import configparser
import logging
import os
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)

GITMODULES = ".gitmodules"


class GitError(RuntimeError):
    def __init__(self, message: str, *, cmd: list[str] | None = None, output: str = "") -> None:
        super().__init__(message)
        self.cmd = cmd or []
        self.output = output


class GitNotFoundError(GitError):
    pass


@dataclass(frozen=True)
class SubmoduleLink:
    name: str
    path: str
    url: str
    branch: str | None = None


def require_git() -> str:
    """
    Return the path of the git executable or raise `GitNotFoundError`.
    """
    exe = shutil.which("git")
    if exe is None:
        raise GitNotFoundError("Git is not installed. Please install Git and try again.")
    return exe


def _git_env_deterministic(base_env: dict[str, str]) -> dict[str, str]:
    """
    Fixed commit metadata, used when settings ask for reproducible commits.
    """
    env = dict(base_env)
    env.setdefault("GIT_AUTHOR_NAME", "submodule-builder")
    env.setdefault("GIT_AUTHOR_EMAIL", "submodule-builder@example.invalid")
    env.setdefault("GIT_COMMITTER_NAME", "submodule-builder")
    env.setdefault("GIT_COMMITTER_EMAIL", "submodule-builder@example.invalid")
    env.setdefault("GIT_AUTHOR_DATE", "1970-01-01T00:00:00Z")
    env.setdefault("GIT_COMMITTER_DATE", "1970-01-01T00:00:00Z")
    return env


_SECTION_RE = re.compile(r'^submodule\s+"(?P<name>.+)"$')


def read_gitmodules(root: str | Path) -> list[SubmoduleLink]:
    """
    Parse `<root>/.gitmodules`. A missing file means no submodules.
    """
    path = Path(root) / GITMODULES
    if not path.is_file():
        return []

    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read_string(path.read_text(encoding="utf-8"))
    except configparser.Error as e:
        raise GitError(f"Cannot parse {path}: {e}") from e

    links: list[SubmoduleLink] = []
    for section in parser.sections():
        m = _SECTION_RE.match(section.strip())
        if not m:
            continue
        entry = parser[section]
        links.append(
            SubmoduleLink(
                name=m.group("name"),
                path=entry.get("path", m.group("name")),
                url=entry.get("url", ""),
                branch=entry.get("branch"),
            )
        )
    return links


class GitRepo:
    def __init__(self, path: str | Path, *, deterministic: bool = False) -> None:
        self.path = Path(path)
        self._deterministic = deterministic

    def _env(self) -> dict[str, str]:
        base = os.environ.copy()
        return _git_env_deterministic(base) if self._deterministic else base

    def run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        """
        Run `git <args>` in this repository, raising `GitError` on failure when `check` is set.
        """
        cmd = ["git", *args]
        log.debug("running %s in %s", " ".join(cmd), self.path)
        proc = subprocess.run(
            cmd,
            cwd=str(self.path),
            env=self._env(),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
        if check and proc.returncode != 0:
            raise GitError(f"Command failed: {' '.join(cmd)}\n\n{proc.stdout}", cmd=cmd, output=proc.stdout)
        return proc

    def _ok(self, *args: str) -> bool:
        return self.run(*args, check=False).returncode == 0

    # -- repository state -------------------------------------------------

    def is_repo(self) -> bool:
        return (self.path / ".git").exists()

    def init(self, branch: str = "main") -> None:
        self.path.mkdir(parents=True, exist_ok=True)
        self.run("init", f"--initial-branch={branch}")

    def current_branch(self) -> str | None:
        """Branch HEAD points at (born or not), or None when detached."""
        proc = self.run("symbolic-ref", "--short", "-q", "HEAD", check=False)
        if proc.returncode != 0:
            return None
        return proc.stdout.strip() or None

    def has_commits(self) -> bool:
        return self._ok("rev-parse", "--verify", "-q", "HEAD")

    def branch_exists(self, branch: str) -> bool:
        return self._ok("rev-parse", "--verify", "-q", f"refs/heads/{branch}")

    def switch_branch(self, branch: str) -> None:
        """
        Check out `branch`, creating it from HEAD when it does not exist.

        Other branches are left untouched.
        """
        if self.current_branch() == branch:
            return
        if self.branch_exists(branch):
            self.run("checkout", branch)
        elif not self.has_commits():
            # Unborn HEAD: nothing to branch from, just repoint it.
            self.run("symbolic-ref", "HEAD", f"refs/heads/{branch}")
        else:
            self.run("checkout", "-b", branch)

    def has_staged_changes(self) -> bool:
        proc = self.run("diff", "--staged", "--quiet", check=False)
        if proc.returncode not in (0, 1):
            raise GitError(f"Command failed: git diff --staged --quiet\n\n{proc.stdout}", output=proc.stdout)
        return proc.returncode == 1

    # -- content ----------------------------------------------------------

    def add(self, *paths: str) -> None:
        self.run("add", "--", *paths)

    def add_all(self) -> None:
        self.run("add", "-A")

    def commit(self, message: str) -> None:
        self.run("commit", "-m", message)

    # -- remotes ----------------------------------------------------------

    def get_remote_url(self, name: str = "origin") -> str | None:
        proc = self.run("remote", "get-url", name, check=False)
        return proc.stdout.strip() if proc.returncode == 0 else None

    def set_remote(self, name: str, url: str) -> None:
        """Insert-or-replace: add the remote, or repoint it when it already exists."""
        if self.get_remote_url(name) is None:
            self.run("remote", "add", name, url)
        else:
            self.run("remote", "set-url", name, url)

    def push(self, remote: str, branch: str, *, set_upstream: bool = False) -> None:
        args = ["push"]
        if set_upstream:
            args.append("-u")
        self.run(*args, remote, branch)

    def pull(self, remote: str, branch: str) -> None:
        self.run("pull", remote, branch)

    def clone_to(self, destination: str | Path) -> GitRepo:
        """Clone this repository into `destination` and return the clone."""
        dest = Path(destination)
        dest.parent.mkdir(parents=True, exist_ok=True)
        self.run("clone", str(self.path.resolve()), str(dest.resolve()))
        return GitRepo(dest, deterministic=self._deterministic)

    # -- submodules -------------------------------------------------------

    def submodule_add(self, url: str, path: str, *, branch: str | None = None) -> None:
        args = ["submodule", "add"]
        if branch:
            args += ["-b", branch]
        self.run(*args, url, path)

    def submodule_absorb(self, path: str) -> None:
        self.run("submodule", "absorbgitdirs", "--", path)

    def submodule_update(self) -> None:
        self.run("submodule", "update", "--init", "--recursive")

    def submodules(self) -> list[SubmoduleLink]:
        return read_gitmodules(self.path)

    def open_submodule(self, link: SubmoduleLink) -> GitRepo:
        return GitRepo(self.path / link.path, deterministic=self._deterministic)

    # -- reporting --------------------------------------------------------

    def status_short(self) -> str:
        return self.run("status", "--short").stdout

    def submodule_status(self) -> str:
        return self.run("submodule", "status").stdout
