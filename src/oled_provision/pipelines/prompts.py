"""Operator prompts used by the interactive provisioning flow."""

from __future__ import annotations

from typing import Callable, Protocol


class Prompter(Protocol):
    """Source of operator answers."""

    def ask(self, question: str) -> str:
        """Return the raw answer to ``question``."""


class ConsolePrompter:
    """Prompter reading answers from standard input."""

    def __init__(self, reader: Callable[[str], str] = input) -> None:
        self._reader = reader

    def ask(self, question: str) -> str:
        return self._reader(question)


def confirm(prompter: Prompter, question: str, *, default: bool = True) -> bool:
    """Ask a yes/no question; an empty answer selects ``default``."""
    suffix = "[Y/n]" if default else "[y/N]"
    answer = prompter.ask(f"{question} {suffix}: ").strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")
