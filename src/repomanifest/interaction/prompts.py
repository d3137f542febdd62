"""
Prompt collaborator: yes/no questions and "press Enter" pauses.
"""

from __future__ import annotations

from typing import Protocol

import typer

from ..errors import UserAbort


class Prompter(Protocol):
    def confirm(self, message: str, default: bool = True) -> bool:
        ...

    def wait_for_enter(self, message: str) -> None:
        """Return once the user hits Enter; raise :class:`UserAbort` on Ctrl+C."""
        ...


class ConsolePrompter:
    """Terminal prompts built on typer (Ctrl+C and EOF become UserAbort)."""

    def confirm(self, message: str, default: bool = True) -> bool:
        try:
            return typer.confirm(message, default=default)
        except typer.Abort as exc:
            raise UserAbort("prompt cancelled") from exc

    def wait_for_enter(self, message: str) -> None:
        try:
            typer.prompt(message, default="", show_default=False, prompt_suffix=" ")
        except typer.Abort as exc:
            raise UserAbort("prompt cancelled") from exc
