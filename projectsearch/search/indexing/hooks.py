"""Keeps the projects index in step with committed project writes."""

import logging

from ...storage.events import Event, EventBus, EventType
from ..backends.base import SearchBackend, SearchError
from .projector import DocumentProjector

logger = logging.getLogger(__name__)


def index_name_for(environment: str) -> str:
    """Name of the projects index for a deployment environment."""
    return f"projects-{environment}"


class IndexingHook:
    """Subscriber that projects and upserts (or deletes) documents.

    Runs after the persistence layer has committed; an upsert failure
    propagates to the publisher while delete failures are only logged,
    because a document that cannot be removed is filtered out by status
    or simply goes stale.
    """

    def __init__(
        self,
        backend: SearchBackend,
        index_name: str,
        projector: DocumentProjector | None = None,
    ):
        self.backend = backend
        self.index_name = index_name
        self.projector = projector or DocumentProjector()

    def attach(self, event_bus: EventBus) -> None:
        event_bus.subscribe(EventType.PROJECT_CREATED, self.on_saved)
        event_bus.subscribe(EventType.PROJECT_UPDATED, self.on_saved)
        event_bus.subscribe(EventType.PROJECT_DELETED, self.on_deleted)

    def detach(self, event_bus: EventBus) -> None:
        event_bus.unsubscribe(EventType.PROJECT_CREATED, self.on_saved)
        event_bus.unsubscribe(EventType.PROJECT_UPDATED, self.on_saved)
        event_bus.unsubscribe(EventType.PROJECT_DELETED, self.on_deleted)

    def on_saved(self, event: Event) -> None:
        """Upsert the projected document when the write changed anything."""
        if not event.changes:
            logger.debug(f"Project {event.project_id} unchanged, not reindexing")
            return

        document = self.projector.project(event.project)
        self.backend.index(self.index_name, document.id, document.to_dict())
        logger.debug(
            f"Indexed project {event.project_id} in {self.index_name} "
            f"({', '.join(sorted(event.changes))} changed)"
        )

    def on_deleted(self, event: Event) -> None:
        """Remove the document; a missing document counts as removed."""
        try:
            deleted = self.backend.delete(self.index_name, event.project_id)
        except SearchError as e:
            logger.warning(
                f"Failed to remove project {event.project_id} from "
                f"{self.index_name}: {e}"
            )
            return

        if deleted:
            logger.debug(f"Removed project {event.project_id} from {self.index_name}")
        else:
            logger.debug(f"Project {event.project_id} was not indexed")
