"""In-process events published by the posting engine."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

from projectledger.domain.entities import EntityKind, EntryStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostingsChanged:
    """Postings for a cost or billing were created or removed."""

    entity_kind: EntityKind
    entity_id: int
    project_id: int
    status: EntryStatus


Handler = Callable[[object], None]


class EventBus:
    """Synchronous publish/subscribe keyed by event type."""

    def __init__(self):
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler) -> None:
        """Register a handler for an event type."""
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Handler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def publish(self, event: object) -> None:
        """Deliver an event to every handler registered for its type.

        Events are published after the postings are committed, so a failing
        handler is logged and does not stop the remaining handlers.
        """
        for handler in list(self._handlers[type(event)]):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed for %r", handler, event)
