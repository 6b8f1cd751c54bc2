"""
prompts.py

Responsibility: interactive input with defaults.

`Prompter` is the only object that reads from the terminal. Operations receive
one as an argument so tests can hand them a scripted replacement.
"""

from __future__ import annotations

from rich.console import Console
from rich.prompt import Confirm, Prompt

from submodule_builder.output import console as default_console


class Prompter:
    def __init__(self, console: Console | None = None) -> None:
        self._console = console or default_console

    def ask(self, prompt: str, default: str | None = None) -> str:
        """
        Ask for a line of text. An empty answer yields `default` when one is given.
        """
        if default:
            answer = Prompt.ask(prompt, default=default, console=self._console)
        else:
            answer = Prompt.ask(prompt, default="", show_default=False, console=self._console)
        return (answer or default or "").strip()

    def confirm(self, prompt: str) -> bool:
        """y/N question; anything but an explicit yes is a no."""
        return Confirm.ask(prompt, default=False, console=self._console)

    def pause(self, prompt: str = "Press Enter to continue...") -> None:
        self._console.input(prompt)
