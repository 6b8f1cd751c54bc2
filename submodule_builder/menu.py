"""
menu.py

Responsibility: the interactive menu loop.

One idle state waiting for a choice, six options, option 6 ends the session.
Input problems (duplicate names, setup not done yet, ...) are reported and the
loop continues; a failing git command is not caught here and ends the session.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path

from submodule_builder.config import NotConfiguredError, Session
from submodule_builder.git import GitRepo
from submodule_builder.hosting import HostingProvider
from submodule_builder.orchestrator import (
    RepoFactory,
    SubmoduleError,
    SubmoduleOrchestrator,
    show_status,
    sync_submodules,
)
from submodule_builder.output import print_error, print_header, print_info, print_success
from submodule_builder.prompts import Prompter
from submodule_builder.provisioner import SetupError, create_project_structure, setup_parent
from submodule_builder.renderer import RenderError

log = logging.getLogger(__name__)

EXIT_CHOICE = "6"


class MenuController:
    def __init__(
        self,
        root: str | Path,
        session: Session,
        host: HostingProvider,
        prompter: Prompter,
        *,
        open_repo: RepoFactory | None = None,
    ) -> None:
        self.root = Path(root)
        self.session = session
        self.host = host
        self.prompter = prompter
        self._open_repo: RepoFactory = open_repo or functools.partial(
            GitRepo, deterministic=session.settings.deterministic_git
        )
        self._actions = {
            "1": self.setup_parent,
            "2": self.add_submodule,
            "3": self.update_submodules,
            "4": self.create_default_submodules,
            "5": self.show_status,
        }

    def options(self) -> list[tuple[str, str]]:
        defaults = ", ".join(self.session.settings.default_submodules)
        return [
            ("1", "Setup new parent repository"),
            ("2", "Add new submodule"),
            ("3", "Update all submodules"),
            ("4", f"Create default submodules ({defaults})"),
            ("5", "Show repository status"),
            (EXIT_CHOICE, "Exit"),
        ]

    def show_menu(self) -> None:
        print_header("GitHub Repository with Submodules Manager")
        for key, label in self.options():
            print_info(f"{key}. {label}")
        print_info()

    def _orchestrator(self) -> SubmoduleOrchestrator:
        return SubmoduleOrchestrator(
            self.session.require_project(),
            self.host,
            self.prompter,
            open_repo=self._open_repo,
        )

    # -- actions ----------------------------------------------------------

    def setup_parent(self) -> None:
        project, description = setup_parent(self.root, self.session.settings, self.host, self.prompter)
        self.session.project = project
        create_project_structure(project, description)

    def add_submodule(self) -> None:
        self._orchestrator().add_submodule()

    def update_submodules(self) -> None:
        settings = self.session.settings
        sync_submodules(
            self._open_repo(self.root),
            primary_branch=settings.primary_branch,
            fail_fast=settings.sync_fail_fast,
        )

    def create_default_submodules(self) -> None:
        self._orchestrator().create_default_submodules()

    def show_status(self) -> None:
        show_status(self._open_repo(self.root))

    # -- loop -------------------------------------------------------------

    def dispatch(self, choice: str) -> bool:
        """
        Run one menu choice. Returns False when the session should end.
        """
        choice = choice.strip()
        if choice == EXIT_CHOICE:
            print_success("Goodbye!")
            return False

        action = self._actions.get(choice)
        if action is None:
            print_error("Invalid option. Please try again.")
            return True

        log.debug("menu choice %s", choice)
        try:
            action()
        except (NotConfiguredError, SetupError, SubmoduleError, RenderError) as e:
            print_error(str(e))
        return True

    def run(self) -> int:
        while True:
            self.show_menu()
            choice = self.prompter.ask("Select an option (1-6)")
            if not self.dispatch(choice):
                return 0
            print_info()
            self.prompter.pause()
