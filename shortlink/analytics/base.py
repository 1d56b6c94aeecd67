"""
Abstract Base Class for click recorders.

Responsibilities:
    - Define the fire-and-forget contract the resolver relies on
    - Support easy substitution (thread pool, queue/outbox, no-op in tests)

LLM Prompt Example:
    "Create an abstract base class for a fire-and-forget side effect and explain
    why its record method must never raise into the caller."
"""

from abc import ABC, abstractmethod

__all__ = ["BaseClickRecorder"]


class BaseClickRecorder(ABC):
    """Abstract base for click-count dispatchers."""

    @abstractmethod
    def record(self, short_code: str):  # pragma: no cover
        """
        Schedule a click increment for `short_code` and return immediately.

        Implementations must not block on the increment and must not raise
        its failures to the caller.
        """
        raise NotImplementedError

    def shutdown(self, wait: bool = True) -> None:  # pragma: no cover
        """Release background resources; optional for recorders that hold none."""
