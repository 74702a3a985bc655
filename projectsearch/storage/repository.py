"""In-memory project repository that publishes commit events.

Stands in for the relational store: every committed save or delete is
announced on the event bus so that index subscribers can follow along.
"""

import logging
import threading

from projectsearch.core.models import Project

from .events import EventBus, EventPublisher, EventType, diff_projects

logger = logging.getLogger(__name__)


class ProjectRepository(EventPublisher):
    """Repository for catalog projects."""

    def __init__(self, event_bus: EventBus | None = None):
        super().__init__(event_bus or EventBus())
        self._projects: dict[int, Project] = {}
        self._lock = threading.Lock()

    def find(self, project_id: int) -> Project | None:
        """Find project by id."""
        return self._projects.get(project_id)

    def find_all(self) -> list[Project]:
        """Find all projects, ordered by id."""
        return [self._projects[k] for k in sorted(self._projects)]

    def count(self) -> int:
        return len(self._projects)

    def save(self, project: Project) -> None:
        """Insert or update a project and publish the commit event."""
        with self._lock:
            previous = self._projects.get(project.id)
            self._projects[project.id] = project

        changes = diff_projects(previous, project)
        event_type = (
            EventType.PROJECT_CREATED if previous is None else EventType.PROJECT_UPDATED
        )
        self._publish_event(event_type, project, changes)

    def save_all(self, projects: list[Project]) -> None:
        for project in projects:
            self.save(project)
        logger.debug(f"Saved {len(projects)} projects")

    def delete(self, project_id: int) -> bool:
        """Delete project by id.

        Returns:
            True if the project existed, False otherwise
        """
        with self._lock:
            project = self._projects.pop(project_id, None)

        if project is None:
            return False

        self._publish_event(EventType.PROJECT_DELETED, project)
        return True
