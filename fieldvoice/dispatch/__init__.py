"""Focus-scoped command dispatch."""

from .registry import DispatchRegistry, CommandHandler

__all__ = ["DispatchRegistry", "CommandHandler"]
