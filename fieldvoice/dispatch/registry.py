"""Single-slot registry routing commands to the screen that has focus."""

import logging
import threading
from typing import Callable, Optional, Union

from ..models.commands import Command

logger = logging.getLogger(__name__)

# Returns True when the routed input was consumed and the pending text can be
# cleared; False or None keeps it for further accumulation.
CommandHandler = Callable[[str], Optional[bool]]


class DispatchRegistry:
    """Holds at most one ``(page_scope, handler)`` pair.

    Registering replaces the previous pair. The registry does not interpret
    commands; it hands the wire string to the active handler.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._page_scope: Optional[str] = None
        self._handler: Optional[CommandHandler] = None
        self._pending_text = ""

    @property
    def page_scope(self) -> Optional[str]:
        return self._page_scope

    @property
    def has_handler(self) -> bool:
        return self._handler is not None

    @property
    def pending_text(self) -> str:
        """Last routed input that the handler did not consume."""
        return self._pending_text

    def register(self, page_scope: str, handler: CommandHandler) -> None:
        """Make ``handler`` the active consumer for ``page_scope``."""
        with self._lock:
            previous = self._page_scope
            self._page_scope = page_scope
            self._handler = handler
        if previous is not None and previous != page_scope:
            logger.info(f"Command handler replaced: {previous} -> {page_scope}")
        else:
            logger.info(f"Command handler registered for {page_scope}")

    def clear(self, page_scope: Optional[str] = None) -> bool:
        """Drop the active handler.

        When ``page_scope`` is given, only clear if it is still the active
        scope, so a screen losing focus cannot remove its successor's handler.
        Returns True if a handler was removed.
        """
        with self._lock:
            if self._handler is None:
                return False
            if page_scope is not None and page_scope != self._page_scope:
                return False
            logger.info(f"Command handler cleared for {self._page_scope}")
            self._page_scope = None
            self._handler = None
            return True

    def dispatch(self, command: Union[Command, str]) -> bool:
        """Route a command to the active handler.

        Returns True if the handler consumed it. With no handler registered the
        input is kept pending and False is returned.
        """
        wire = command if isinstance(command, str) else command.encode()
        with self._lock:
            handler = self._handler
            page_scope = self._page_scope
            self._pending_text = wire

        if handler is None:
            logger.warning(f"No active command handler; keeping {wire!r}")
            return False

        logger.debug(f"Dispatching {wire!r} to {page_scope}")
        consumed = bool(handler(wire))
        if consumed:
            with self._lock:
                if self._pending_text == wire:
                    self._pending_text = ""
        return consumed

    def set_pending_text(self, text: str) -> None:
        with self._lock:
            self._pending_text = text
