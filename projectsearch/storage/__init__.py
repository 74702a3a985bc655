"""Project storage and commit events."""

from .events import Event, EventBus, EventPublisher, EventType, diff_projects
from .repository import ProjectRepository

__all__ = [
    "Event",
    "EventBus",
    "EventPublisher",
    "EventType",
    "ProjectRepository",
    "diff_projects",
]
