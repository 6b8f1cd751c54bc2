"""
provisioner.py

Responsibility: bring the parent repository into existence.

Flow:
1) Prompt for name, account, description, visibility
2) Initialize the local repository on the primary branch (or switch an existing one to it)
3) Create the remote when the hosting provider is usable, then bind `origin`
4) Create the services directory

Remote problems never stop local setup; they are reported as warnings.
"""

from __future__ import annotations

import logging
from pathlib import Path

from submodule_builder.config import ProjectConfig, Settings
from submodule_builder.git import GitRepo
from submodule_builder.hosting import MANUAL_CREATE_URL, HostingError, HostingProvider
from submodule_builder.output import print_header, print_info, print_success, print_warning
from submodule_builder.prompts import Prompter
from submodule_builder.templates import generate_parent

log = logging.getLogger(__name__)


class SetupError(ValueError):
    pass


def ensure_local_repo(repo: GitRepo, branch: str) -> bool:
    """
    Make sure `repo` exists and is on `branch`. Returns True when it was created.
    """
    if not repo.is_repo():
        repo.init(branch)
        print_success(f"Initialized local Git repository with {branch} branch")
        return True

    print_warning("Git repository already exists")
    repo.switch_branch(branch)
    return False


def provision_remote(
    repo: GitRepo,
    project: ProjectConfig,
    host: HostingProvider,
    *,
    description: str,
    private: bool,
) -> bool:
    """
    Create the parent's remote if it is missing and bind it as `origin`.

    Returns False when the hosting provider is not usable; nothing is touched then.
    """
    status = host.check()
    if not status.available:
        print_warning(status.message)
        return False
    print_success(status.message)

    full_name = project.full_name
    try:
        if host.repo_exists(full_name):
            print_warning(f"Repository {full_name} already exists")
        else:
            host.create_repo(full_name, description=description, private=private)
            print_success(f"Created GitHub repository: {full_name}")
    except HostingError as e:
        log.warning("remote setup for %s failed: %s", full_name, e)
        print_warning(f"Could not create GitHub repository {full_name}: {e}")

    repo.set_remote("origin", project.remote_url)
    print_success("Set remote origin")
    return True


def setup_parent(
    root: str | Path,
    settings: Settings,
    host: HostingProvider,
    prompter: Prompter,
) -> tuple[ProjectConfig, str]:
    """
    Interactive parent setup. Returns the session configuration and the description entered.
    """
    print_header("Setting up Parent Repository")

    parent_name = prompter.ask("Enter parent repository name", settings.parent_name)
    owner = prompter.ask("Enter GitHub username/organization")
    if not parent_name:
        raise SetupError("A parent repository name is required.")
    if not owner:
        raise SetupError("A GitHub username/organization is required.")
    description = prompter.ask("Enter repository description", settings.parent_description)
    private = prompter.confirm("Make repository private?")

    project = ProjectConfig(
        root=Path(root),
        parent_name=parent_name,
        owner=owner,
        services_dir=settings.services_dir,
        default_submodules=settings.default_submodules,
        primary_branch=settings.primary_branch,
        remote_base_url=settings.remote_base_url,
    )

    repo = GitRepo(project.root, deterministic=settings.deterministic_git)
    ensure_local_repo(repo, project.primary_branch)

    if not provision_remote(repo, project, host, description=description, private=private):
        print_warning(f"Please create the repository manually at: {MANUAL_CREATE_URL}")
        print_info(f"Repository name: {parent_name}")
        print_info(f"Description: {description}")
        prompter.pause("Press Enter when repository is created and configured")

    project.services_path.mkdir(parents=True, exist_ok=True)
    print_success("Created services directory")
    return project, description


def create_project_structure(project: ProjectConfig, description: str) -> None:
    print_header("Creating Project Structure")
    generate_parent(project, description=description)
    print_success("Created project structure")
