"""
templates.py

Responsibility: starter content for child repositories and the parent layout.

Each template kind is a directory under `templates/` shipped with the package.
Every kind additionally gets the shared `README.md`, rendered with the child's
name and a label for the kind.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

from submodule_builder.config import ChildModule, ProjectConfig, remote_url_for
from submodule_builder.renderer import RenderResult, render_template_dir

log = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
SHARED_DIR = TEMPLATES_DIR / "_shared"
PARENT_DIR = TEMPLATES_DIR / "_parent"


class TemplateKind(str, Enum):
    NODE = "node"
    PYTHON = "python"
    STATIC = "static"
    EMPTY = "empty"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def directory(self) -> Path:
        return TEMPLATES_DIR / self.value

    @classmethod
    def parse(cls, value: str) -> TemplateKind | None:
        """Case-insensitive lookup; None for anything unknown."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_LABELS = {
    TemplateKind.NODE: "Node.js service",
    TemplateKind.PYTHON: "Python service",
    TemplateKind.STATIC: "Static website",
    TemplateKind.EMPTY: "Service module",
}

KIND_CHOICES = "/".join(k.value for k in TemplateKind)


def child_context(child: ChildModule, *, remote_base_url: str, kind: TemplateKind) -> dict[str, Any]:
    return {
        "name": child.name,
        "parent_name": child.parent_name,
        "owner": child.owner,
        "repo_name": child.repo_name,
        "description": child.description or f"This is the {child.name} service module.",
        "kind_label": kind.label,
        "remote_url": remote_url_for(remote_base_url, child.full_name),
    }


def generate_child(
    kind: TemplateKind,
    destination: str | Path,
    child: ChildModule,
    *,
    remote_base_url: str = "https://github.com",
) -> list[str]:
    """
    Write the file set for `kind` plus the shared README into `destination`.

    Returns the written paths relative to `destination`, posix style.
    """
    context = child_context(child, remote_base_url=remote_base_url, kind=kind)
    written: list[str] = []
    for source in (kind.directory, SHARED_DIR):
        result = render_template_dir(template_dir=source, destination_dir=destination, context=context)
        written.extend(result.written)
    log.debug("generated %s template for %s: %s", kind.value, child.name, written)
    return written


def generate_parent(project: ProjectConfig, *, description: str) -> RenderResult:
    """Write the parent's README.md and .gitignore at the project root."""
    context = {
        "parent_name": project.parent_name,
        "description": description,
        "services_dir": project.services_dir,
        "default_submodules": list(project.default_submodules),
        "primary_branch": project.primary_branch,
        "remote_url": project.remote_url,
    }
    return render_template_dir(template_dir=PARENT_DIR, destination_dir=project.root, context=context)
