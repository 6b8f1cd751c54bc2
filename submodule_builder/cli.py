"""
cli.py

Responsibility: CLI entrypoint for submodule-builder.

High-level flow:
1) Parse flags, configure logging, load settings
2) Verify git is installed (fatal otherwise)
3) Pick a hosting provider
4) Hand control to the interactive menu until the user exits

All real work lives in the menu's collaborators:
- Parent setup: `provisioner.py`
- Child repositories and links: `orchestrator.py`
- Templates: `templates.py` / `renderer.py`
- Remote hosting: `hosting.py` / `github_client.py`
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path

from submodule_builder import __version__
from submodule_builder.config import HOSTING_MODES, Session, SettingsError, load_settings
from submodule_builder.git import GitError, GitNotFoundError, require_git
from submodule_builder.hosting import detect_hosting
from submodule_builder.menu import MenuController
from submodule_builder.output import print_error, print_success
from submodule_builder.prompts import Prompter

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def setup_logging(*, verbose: bool = False, log_file: str | None = None) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        handlers=handlers,
        force=True,
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="submodule-builder",
        description="Interactive manager for a parent repository with service submodules",
    )
    p.add_argument("--config", default=None, help="YAML settings file (default: ./submodule-builder.yaml if present)")
    p.add_argument("--root", default=".", help="Parent repository root (default: current directory)")
    p.add_argument("--hosting", choices=HOSTING_MODES, default=None, help="Hosting provider (overrides settings)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every git/gh command")
    p.add_argument("--log-file", default=None, help="Also write logs to this file")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose, log_file=args.log_file)

    root = Path(args.root).resolve()
    try:
        settings = load_settings(args.config, cwd=root)
    except SettingsError as e:
        print_error(str(e))
        return EXIT_FAILURE
    if args.hosting:
        settings = dataclasses.replace(settings, hosting=args.hosting)

    try:
        require_git()
    except GitNotFoundError as e:
        print_error(str(e))
        return EXIT_FAILURE
    print_success("Git is available")

    menu = MenuController(root, Session(settings=settings), detect_hosting(settings.hosting), Prompter())
    try:
        return menu.run()
    except GitError as e:
        log.error("git command failed: %s", e.cmd)
        print_error(str(e))
        return EXIT_FAILURE
    except (KeyboardInterrupt, EOFError):
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    raise SystemExit(main())
