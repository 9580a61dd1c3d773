"""Command and match result models."""

from dataclasses import dataclass
from typing import Any, Optional, Union

import numpy as np

GLOBAL_SCOPE = "global"


@dataclass(frozen=True)
class Action:
    """A terminal command, e.g. ``next-shop``."""
    command_id: str

    def encode(self) -> str:
        return self.command_id


@dataclass(frozen=True)
class Fill:
    """A value for the field opened by a trigger command."""
    trigger_id: str
    value: str

    def encode(self) -> str:
        return f"{self.trigger_id}:{self.value}"


Command = Union[Action, Fill]


def parse_command(wire: str) -> Command:
    """Parse the dispatch wire format back into a command.

    ``"add-price:120"`` becomes ``Fill("add-price", "120")``, a string without
    a colon becomes an ``Action``. Only the first colon separates the trigger
    from the value.
    """
    trigger_id, sep, value = wire.partition(":")
    if not sep:
        return Action(wire.strip())
    return Fill(trigger_id.strip(), value.strip())


@dataclass(frozen=True)
class CommandDescriptor:
    """A command description with its precomputed embedding."""
    command_id: str
    page_scope: str
    description: str
    embedding: np.ndarray
    magnitude: float
    is_trigger: bool = False

    def in_scope(self, page: str) -> bool:
        return self.page_scope == page or self.page_scope == GLOBAL_SCOPE


@dataclass(frozen=True)
class CatalogEntry:
    """A shop or product record with its precomputed embedding."""
    kind: str  # "shop" | "product"
    record: Any
    text: str
    embedding: np.ndarray
    magnitude: float


@dataclass
class MatchResult:
    """Output of the semantic matcher for one utterance.

    ``command`` is the matched command id, or None. When None and
    ``fill_trigger`` is set, ``corrected_text`` is the value for the field the
    trigger opened; when both are None the utterance is ignored.
    """
    command: Optional[str]
    corrected_text: str
    score: float = 0.0
    fill_trigger: Optional[str] = None

    def to_command(self) -> Optional[Command]:
        """Tagged command for the dispatch registry."""
        if self.command is not None:
            return Action(self.command)
        if self.fill_trigger is not None:
            return Fill(self.fill_trigger, self.corrected_text)
        return None
