"""
submodule_builder package

This package implements an interactive manager for a parent repository whose
services live in their own repositories, linked in as git submodules.

Key responsibilities are split across modules:
- `config.py`: YAML settings and the in-memory session configuration
- `git.py`: git subprocess wrapper and `.gitmodules` reading
- `hosting.py` / `github_client.py`: remote repository creation (GitHub CLI or REST API)
- `renderer.py` / `templates.py`: starter file sets for child repositories and the parent
- `provisioner.py`: parent repository setup
- `orchestrator.py`: child repositories, submodule links, sync and status
- `menu.py` / `cli.py`: interactive menu and entrypoint
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
