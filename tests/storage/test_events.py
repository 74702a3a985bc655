"""Tests for the event system."""

from datetime import datetime
from unittest.mock import Mock

import pytest

from projectsearch.core.models import Project
from projectsearch.storage.events import (
    Event,
    EventBus,
    EventPublisher,
    EventType,
    diff_projects,
)


@pytest.fixture
def project():
    return Project(id=1, name="rails", platform="Rubygems")


def make_event(project, event_type=EventType.PROJECT_CREATED):
    return Event(type=event_type, timestamp=datetime.now(), project=project)


class TestEvent:
    def test_project_id(self, project):
        event = make_event(project)

        assert event.project_id == 1
        assert event.changes == {}


class TestEventBus:
    """Test the event bus publish/subscribe system."""

    def test_subscribers_receive_matching_events(self, project):
        bus = EventBus()
        created = Mock()
        deleted = Mock()
        bus.subscribe(EventType.PROJECT_CREATED, created)
        bus.subscribe(EventType.PROJECT_DELETED, deleted)

        event = make_event(project)
        bus.publish(event)

        created.assert_called_once_with(event)
        deleted.assert_not_called()

    def test_unsubscribe(self, project):
        bus = EventBus()
        handler = Mock()
        bus.subscribe(EventType.PROJECT_CREATED, handler)
        bus.unsubscribe(EventType.PROJECT_CREATED, handler)

        bus.publish(make_event(project))

        handler.assert_not_called()

    def test_unsubscribe_unknown_type_is_ignored(self):
        EventBus().unsubscribe(EventType.PROJECT_UPDATED, Mock())

    def test_subscriber_errors_propagate(self, project):
        """A failing subscriber surfaces to the publisher."""
        bus = EventBus()
        bus.subscribe(EventType.PROJECT_CREATED, Mock(side_effect=RuntimeError("boom")))

        with pytest.raises(RuntimeError, match="boom"):
            bus.publish(make_event(project))

    def test_history(self, project):
        bus = EventBus()
        bus.publish(make_event(project))
        bus.publish(make_event(project, EventType.PROJECT_DELETED))

        assert len(bus.get_history()) == 2
        assert [e.type for e in bus.get_history(EventType.PROJECT_DELETED)] == [
            EventType.PROJECT_DELETED
        ]

        bus.clear_history()
        assert bus.get_history() == []

    def test_history_is_bounded(self, project):
        bus = EventBus(history_limit=3)

        for _ in range(5):
            bus.publish(make_event(project))

        assert len(bus.get_history()) == 3


class TestEventPublisher:
    def test_publish_event(self, project):
        bus = EventBus()
        handler = Mock()
        bus.subscribe(EventType.PROJECT_UPDATED, handler)

        EventPublisher(bus)._publish_event(
            EventType.PROJECT_UPDATED, project, {"stars": (1, 2)}
        )

        event = handler.call_args.args[0]
        assert event.project is project
        assert event.changes == {"stars": (1, 2)}


class TestDiffProjects:
    """Change sets between project versions."""

    def test_new_project(self, project):
        changes = diff_projects(None, project)

        assert changes == {
            "id": (None, 1),
            "name": (None, "rails"),
            "platform": (None, "Rubygems"),
            "normalized_licenses": (None, ()),
            "keywords": (None, ()),
        }

    def test_changed_attributes(self, project):
        updated = Project(id=1, name="rails", platform="Rubygems", stars=10)

        assert diff_projects(project, updated) == {"stars": (None, 10)}

    def test_identical_versions(self, project):
        assert diff_projects(project, project) == {}
