"""
Reducer: Pure snapshot transition functions.

The reducer is the heart of playback. It must be:
- Pure (no side effects, no I/O, input snapshot never mutated)
- Deterministic (same input -> same output)
- Total over the event union (every event type has a handler)
"""

import dataclasses
from typing import Callable, Dict, Optional

from .errors import InvalidTransitionError
from .events import Event
from .handlers import register_handlers
from .snapshot import Snapshot

# Handler signature: (current_snapshot, event) -> new_snapshot
Handler = Callable[[Snapshot, Event], Snapshot]


class Reducer:
    """
    Registry of event handlers for snapshot transitions.

    Usage:
        reducer = Reducer()
        reducer.register("swap", on_swap)
        next_snapshot = reducer.apply(snapshot, event)
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    def register(self, event_type: str, handler: Handler) -> None:
        """
        Register event handler.

        Args:
            event_type: Event type string
            handler: Pure function (current_snapshot, event) -> new_snapshot
        """
        self._handlers[event_type] = handler

    def handles(self, event_type: str) -> bool:
        return event_type in self._handlers

    def apply(self, snapshot: Snapshot, event: Event) -> Snapshot:
        """
        Apply event to snapshot using registered handler.

        Args:
            snapshot: Current snapshot
            event: Event to apply

        Returns:
            New snapshot with event applied and step incremented

        Raises:
            InvalidTransitionError: If no handler registered for event type
        """
        if event.type not in self._handlers:
            raise InvalidTransitionError(f"No handler for event type: {event.type}")

        updated = self._handlers[event.type](snapshot, event)
        return dataclasses.replace(updated, step=snapshot.step + 1)


_default: Optional[Reducer] = None


def default_reducer() -> Reducer:
    """Reducer with the standard handlers for every event type."""
    global _default
    if _default is None:
        reducer = Reducer()
        register_handlers(reducer)
        _default = reducer
    return _default
