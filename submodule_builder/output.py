"""
output.py

Responsibility: user-facing status lines.

Every message the tool shows to the person at the terminal goes through here so
the categories (header, success, warning, error, plain info) stay visually
distinct. Diagnostics for developers go through `logging` instead.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False, soft_wrap=True)


def print_header(title: str) -> None:
    rule = "=" * 37
    console.print(f"\n[blue]{rule}\n{escape(title)}\n{rule}[/blue]\n")


def print_success(message: str) -> None:
    console.print(f"[green]✓ {escape(message)}[/green]")


def print_warning(message: str) -> None:
    console.print(f"[yellow]⚠ {escape(message)}[/yellow]")


def print_error(message: str) -> None:
    console.print(f"[red]✗ {escape(message)}[/red]")


def print_info(message: str = "") -> None:
    console.print(escape(message))
