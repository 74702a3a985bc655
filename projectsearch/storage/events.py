"""Event system for project lifecycle changes.

The persistence layer publishes an event after a project write has been
committed; subscribers such as the search indexing hook react to it.
"""

import logging
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from projectsearch.core.models import Project

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Committed project writes."""

    PROJECT_CREATED = "project.created"
    PROJECT_UPDATED = "project.updated"
    PROJECT_DELETED = "project.deleted"


@dataclass
class Event:
    """An event that occurred in the system.

    ``changes`` maps each attribute modified by the committed write to its
    ``(old, new)`` values.
    """

    type: EventType
    timestamp: datetime
    project: Project
    changes: dict[str, tuple[Any, Any]] = field(default_factory=dict)

    @property
    def project_id(self) -> int:
        return self.project.id


Handler = Callable[[Event], None]


class EventBus:
    """Synchronous dispatcher of project events.

    Keeps the most recent events (``history_limit``) for inspection.
    """

    def __init__(self, history_limit: int = 1000):
        self._handlers: defaultdict[EventType, list[Handler]] = defaultdict(list)
        self._recent: deque[Event] = deque(maxlen=history_limit)

    def subscribe(self, event_type: EventType, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: EventType, handler: Handler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Event) -> None:
        """Record the event and call every handler of its type in order.

        Handler errors propagate to the publisher so that a failed
        index write is visible to the code that committed the change.
        """
        self._recent.append(event)
        for handler in list(self._handlers.get(event.type, [])):
            handler(event)

    def get_history(
        self, event_type: EventType | None = None, limit: int = 100
    ) -> list[Event]:
        """Most recent events, oldest first, optionally of one type."""
        events = [e for e in self._recent if event_type is None or e.type == event_type]
        return events[-limit:]

    def clear_history(self) -> None:
        self._recent.clear()


class EventPublisher:
    """Mixin for classes that publish project events."""

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus

    def _publish_event(
        self,
        event_type: EventType,
        project: Project,
        changes: dict[str, tuple[Any, Any]] | None = None,
    ) -> None:
        event = Event(
            type=event_type,
            timestamp=datetime.now(),
            project=project,
            changes=changes or {},
        )
        logger.debug(f"Publishing {event_type.name} for project {project.id}")
        self.event_bus.publish(event)


def diff_projects(old: Project | None, new: Project) -> dict[str, tuple[Any, Any]]:
    """Compute the attribute changes between two versions of a project.

    A missing ``old`` version means every set attribute of ``new`` changed.
    """
    changes = {}
    for name in new.__struct_fields__:
        before = getattr(old, name) if old is not None else None
        after = getattr(new, name)
        if before != after:
            changes[name] = (before, after)
    return changes
