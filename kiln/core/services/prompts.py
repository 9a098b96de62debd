"""
Prompters — the interactive answer source and yes/no confirmations.

The answer engine and the materializer never talk to the terminal
directly; they go through a :class:`Prompter`:

    ClickPrompter     real terminal via click.prompt / click.confirm
    DefaultsPrompter  --no-input: every default accepted, every
                      confirmation declined unless its default is yes

Prompts are written to stderr so ``--json`` output on stdout stays clean.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import click

from kiln.core.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_SECRET_ATTEMPTS = 3


class Prompter(ABC):
    """Asks the user for values."""

    #: Whether re-asking can produce a different value
    interactive = True

    @abstractmethod
    def text(self, prompt: str, default: str = "") -> str:
        """Free-text entry."""

    @abstractmethod
    def read_hidden(self, prompt: str) -> str:
        """Masked entry, no default shown."""

    @abstractmethod
    def single_choice(self, prompt: str, choices: list[str], default_index: int = 0) -> int:
        """Pick one choice; returns its index."""

    @abstractmethod
    def multiple_choice(self, prompt: str, choices: list[str], defaults: list[bool]) -> list[int]:
        """Pick any number of choices; returns their indices in choice order."""

    @abstractmethod
    def confirm(self, prompt: str, default: bool = False) -> bool:
        """Yes/no."""

    @abstractmethod
    def warn(self, message: str) -> None:
        """Show a problem with the last answer."""

    def secret(
        self,
        prompt: str,
        default: str = "",
        confirm: bool = False,
        mismatch_err: str = "Mismatch",
    ) -> str:
        """Masked entry, typed twice when *confirm* is set.

        Raises:
            ValidationError: After MAX_SECRET_ATTEMPTS mismatched pairs.
        """
        for attempt in range(1, MAX_SECRET_ATTEMPTS + 1):
            value = self.read_hidden(prompt) or default
            if not confirm:
                return value
            again = self.read_hidden(f"{prompt} (confirm)") or default
            if value == again:
                return value
            logger.debug("Secret confirmation mismatch (attempt %d/%d)", attempt, MAX_SECRET_ATTEMPTS)
            self.warn(mismatch_err)
        raise ValidationError(f"{mismatch_err} ({MAX_SECRET_ATTEMPTS} attempts)")


class ClickPrompter(Prompter):
    """Terminal prompter built on click."""

    def text(self, prompt: str, default: str = "") -> str:
        return click.prompt(prompt, default=default, show_default=bool(default), err=True)

    def read_hidden(self, prompt: str) -> str:
        return click.prompt(prompt, default="", show_default=False, hide_input=True, err=True)

    def single_choice(self, prompt: str, choices: list[str], default_index: int = 0) -> int:
        click.echo(prompt, err=True)
        for i, choice in enumerate(choices, 1):
            marker = ">" if i - 1 == default_index else " "
            click.echo(f" {marker} {i}) {choice}", err=True)
        picked = click.prompt(
            "Select",
            type=click.IntRange(1, len(choices)),
            default=default_index + 1,
            err=True,
        )
        return picked - 1

    def multiple_choice(self, prompt: str, choices: list[str], defaults: list[bool]) -> list[int]:
        click.echo(prompt, err=True)
        for i, choice in enumerate(choices, 1):
            mark = "x" if i - 1 < len(defaults) and defaults[i - 1] else " "
            click.echo(f"  [{mark}] {i}) {choice}", err=True)
        default = ",".join(str(i + 1) for i, on in enumerate(defaults) if on)

        while True:
            raw = click.prompt(
                "Select (comma-separated numbers, empty for none)",
                default=default,
                show_default=bool(default),
                err=True,
            )
            try:
                return parse_selection(raw, len(choices))
            except ValueError as e:
                self.warn(str(e))

    def confirm(self, prompt: str, default: bool = False) -> bool:
        return click.confirm(prompt, default=default, err=True)

    def warn(self, message: str) -> None:
        click.secho(f"⚠️  {message}", fg="yellow", err=True)


class DefaultsPrompter(Prompter):
    """Non-interactive prompter for ``--no-input``."""

    interactive = False

    def text(self, prompt: str, default: str = "") -> str:
        logger.debug("Accepting default for %r: %r", prompt, default)
        return default

    def read_hidden(self, prompt: str) -> str:
        return ""

    def secret(self, prompt: str, default: str = "", confirm: bool = False, mismatch_err: str = "Mismatch") -> str:
        return default

    def single_choice(self, prompt: str, choices: list[str], default_index: int = 0) -> int:
        return default_index

    def multiple_choice(self, prompt: str, choices: list[str], defaults: list[bool]) -> list[int]:
        return [i for i, on in enumerate(defaults) if on and i < len(choices)]

    def confirm(self, prompt: str, default: bool = False) -> bool:
        logger.debug("Non-interactive: %r → %s", prompt, default)
        return default

    def warn(self, message: str) -> None:
        logger.warning(message)


def parse_selection(raw: str, count: int) -> list[int]:
    """Parse ``"1, 3"`` into sorted zero-based indices.

    Raises:
        ValueError: On non-numbers or numbers outside 1..count.
    """
    indices: set[int] = set()
    for part in raw.replace(" ", "").split(","):
        if not part:
            continue
        if not part.isdigit():
            raise ValueError(f"Not a number: {part!r}")
        n = int(part)
        if not 1 <= n <= count:
            raise ValueError(f"Choice {n} out of range 1-{count}")
        indices.add(n - 1)
    return sorted(indices)
