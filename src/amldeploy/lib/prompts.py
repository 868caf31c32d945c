"""Operator confirmation capabilities.

Controllers never call ``click.confirm`` directly; they receive a
``Confirmer`` and call it with a prompt and a default answer. This keeps the
interactive prompt, forced runs and scripted test answers interchangeable.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Protocol

import click


class Confirmer(Protocol):
    """Callable that asks the operator a yes/no question."""

    def __call__(self, prompt: str, default: bool = False) -> bool:
        """Return True when the operator agrees."""
        ...


class InteractiveConfirmer:
    """Ask on the terminal using ``click.confirm``.

    End of input or Ctrl-C at the prompt counts as "no".
    """

    def __call__(self, prompt: str, default: bool = False) -> bool:
        try:
            return click.confirm(prompt, default=default)
        except click.Abort:
            click.echo()
            return False


class AlwaysConfirm:
    """Answer yes to every prompt (used for automated runs)."""

    def __call__(self, prompt: str, default: bool = False) -> bool:
        return True


class ScriptedConfirmer:
    """Replay a fixed sequence of answers and record the prompts asked.

    Raises AssertionError when more prompts are asked than answers were
    scripted, so an unexpected prompt fails loudly instead of blocking.
    """

    def __init__(self, answers: Iterable[bool] = ()) -> None:
        self._answers: deque[bool] = deque(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str, default: bool = False) -> bool:
        self.prompts.append(prompt)
        if not self._answers:
            raise AssertionError(f"Unexpected confirmation prompt: {prompt!r}")
        return self._answers.popleft()
