"""
orchestrator.py

Responsibility: child repositories and their submodule links.

High-level flow for one child (`create_submodule`):
1) Initialize a scratch repository and fill it from a template
2) (Optional) Create the remote via the hosting provider and bind `origin`
3) Commit, and push when `origin` is bound
4) Link it into the parent at `<services-dir>/<name>`

The scratch repository is cloned into the parent and adopted by
`git submodule add`, so the link is made the same way whether or not the remote
exists yet. The URL recorded is always the intended remote URL.
"""

from __future__ import annotations

import functools
import logging
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from submodule_builder.config import ProjectConfig, remote_url_for
from submodule_builder.git import GitError, GitRepo, SubmoduleLink
from submodule_builder.hosting import HostingError, HostingProvider
from submodule_builder.output import print_error, print_header, print_info, print_success, print_warning
from submodule_builder.prompts import Prompter
from submodule_builder.renderer import RenderError
from submodule_builder.templates import KIND_CHOICES, TemplateKind, generate_child

log = logging.getLogger(__name__)

RepoFactory = Callable[[Path], GitRepo]


class SubmoduleError(ValueError):
    pass


@dataclass
class SyncReport:
    updated: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def validate_child_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise SubmoduleError("A submodule name is required.")
    if name in (".", "..") or "/" in name or "\\" in name or name.startswith("-"):
        raise SubmoduleError(f"Invalid submodule name: {name!r}")
    return name


class SubmoduleOrchestrator:
    def __init__(
        self,
        project: ProjectConfig,
        host: HostingProvider,
        prompter: Prompter,
        *,
        open_repo: RepoFactory | None = None,
        deterministic: bool = False,
    ) -> None:
        self.project = project
        self.host = host
        self.prompter = prompter
        self._open_repo: RepoFactory = open_repo or functools.partial(GitRepo, deterministic=deterministic)
        self.parent = self._open_repo(project.root)

    def exists(self, name: str) -> bool:
        """True when `<services-dir>/<name>` is already on disk or registered in .gitmodules."""
        path = self.project.submodule_path(name)
        if (self.project.root / path).exists():
            return True
        return any(link.path == path for link in self.parent.submodules())

    def _remote_url(self, full_name: str) -> str:
        return remote_url_for(self.project.remote_base_url, full_name)

    def _ask_kind(self, name: str) -> TemplateKind:
        answer = self.prompter.ask(f"Enter template type ({KIND_CHOICES})", TemplateKind.EMPTY.value)
        kind = TemplateKind.parse(answer)
        if kind is None:
            print_warning(f"Unknown template type {answer!r} for {name}, using empty")
            return TemplateKind.EMPTY
        return kind

    def _provision_remote(self, scratch: GitRepo, full_name: str, name: str, description: str) -> None:
        status = self.host.check()
        if not status.available:
            print_warning(status.message)
            return
        print_success(status.message)

        private = self.prompter.confirm(f"Make {name} repository private?")
        try:
            self.host.create_repo(full_name, description=description, private=private)
        except HostingError as e:
            log.warning("creating %s failed: %s", full_name, e)
            print_warning(f"Could not create GitHub repository {full_name}; {name} stays local-only")
            return
        print_success(f"Created GitHub repository: {full_name}")
        scratch.set_remote("origin", self._remote_url(full_name))

    def create_submodule(self, name: str) -> SubmoduleLink:
        """
        Create one child repository and link it into the parent.

        Nothing is rolled back when a later step fails.
        """
        name = validate_child_name(name)
        if self.exists(name):
            raise SubmoduleError(f"Submodule {name} already exists")

        print_header(f"Creating Submodule: {name}")
        description = self.prompter.ask(f"Enter description for {name}", f"{name} service module")
        kind = self._ask_kind(name)
        child = self.project.child(name, description=description, template=kind.value)
        branch = self.project.primary_branch
        path = self.project.submodule_path(name)
        url = self._remote_url(child.full_name)

        with tempfile.TemporaryDirectory(prefix=f"{child.repo_name}-") as tmp:
            scratch = self._open_repo(Path(tmp) / child.repo_name)
            scratch.init(branch)
            generate_child(kind, scratch.path, child, remote_base_url=self.project.remote_base_url)

            self._provision_remote(scratch, child.full_name, name, description)

            scratch.add_all()
            scratch.commit(f"Initial commit for {name} service")

            if scratch.get_remote_url("origin"):
                scratch.push("origin", branch, set_upstream=True)
                print_success(f"Pushed {name} to GitHub")

            clone = scratch.clone_to(self.project.root / path)
            clone.set_remote("origin", url)
            self.parent.submodule_add(url, path, branch=branch)
            self.parent.submodule_absorb(path)

        print_success(f"Added {name} as submodule")
        for link in self.parent.submodules():
            if link.path == path:
                return link
        return SubmoduleLink(name=path, path=path, url=url, branch=branch)

    def _push_parent(self, message: str) -> None:
        if self.parent.get_remote_url("origin"):
            self.parent.push("origin", self.project.primary_branch)
            print_success(message)

    def add_submodule(self) -> SubmoduleLink:
        """Prompt for a name, create it, and commit the new link in the parent."""
        print_header("Adding New Submodule")
        name = validate_child_name(self.prompter.ask("Enter submodule name"))
        if self.exists(name):
            raise SubmoduleError(f"Submodule {name} already exists")

        link = self.create_submodule(name)
        self.parent.add(".gitmodules", link.path)
        self.parent.commit(f"Add {name} submodule")
        self._push_parent("Pushed submodule addition to GitHub")
        return link

    def create_default_submodules(self) -> list[SubmoduleLink]:
        """
        Create every default child that is not there yet, then commit all new links at once.

        A failing child is reported and skipped; the others still run.
        """
        print_header("Creating Default Submodules")
        created: list[SubmoduleLink] = []
        for name in self.project.default_submodules:
            if self.exists(name):
                print_warning(f"Submodule {name} already exists")
                continue
            try:
                created.append(self.create_submodule(name))
            except (GitError, HostingError, RenderError, SubmoduleError) as e:
                log.warning("default submodule %s failed: %s", name, e)
                print_warning(f"Failed to create submodule {name}: {e}")

        if not self.parent.has_staged_changes():
            print_warning("No new submodules to commit")
            return created

        self.parent.commit(f"Add default submodules: {' '.join(self.project.default_submodules)}")
        self._push_parent("Pushed all submodules to GitHub")
        return created


def sync_submodules(repo: GitRepo, *, primary_branch: str = "main", fail_fast: bool = False) -> SyncReport:
    """
    Check out every submodule at its recorded commit, then pull its tracked branch.

    With `fail_fast` the first failing pull propagates; otherwise failures are
    collected in the returned report.
    """
    print_header("Updating Submodules")
    repo.submodule_update()

    report = SyncReport()
    for link in repo.submodules():
        branch = link.branch or primary_branch
        try:
            repo.open_submodule(link).pull("origin", branch)
        except GitError as e:
            if fail_fast:
                raise
            log.warning("pull failed in %s: %s", link.path, e)
            report.failed[link.path] = str(e)
            print_error(f"Failed to update {link.path}")
            continue
        report.updated.append(link.path)

    if report.ok:
        print_success("All submodules updated")
    else:
        print_warning(f"{len(report.failed)} submodule(s) failed to update: {', '.join(report.failed)}")
    return report


def show_status(repo: GitRepo) -> None:
    print_header("Repository Status")
    if not repo.is_repo():
        print_info("Not a Git repository")
        return

    print_info("Git Status:")
    print_info(repo.status_short().rstrip("\n"))
    print_info()
    print_info("Submodules:")
    if (repo.path / ".gitmodules").is_file():
        print_info(repo.submodule_status().rstrip("\n"))
    else:
        print_info("No submodules found")
