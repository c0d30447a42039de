"""Unit tests for domain entities."""

from datetime import timedelta
from uuid import uuid4

import pytest

from eventtalk.domain.model.common import utcnow
from eventtalk.domain.value import EventId, Role, UserId
from tests.conftest import make_actor, make_comment, make_notification


class TestComment:
    """Tests for Comment."""

    def test_edited_sets_edit_markers(self):
        comment = make_comment(EventId(uuid4()), UserId(uuid4()), content="Before")
        at = utcnow() + timedelta(minutes=5)

        edited = comment.edited("After", at=at)

        assert edited.content == "After"
        assert edited.is_edited is True
        assert edited.edited_at == at
        assert edited.updated_at == at
        assert edited.created_at == comment.created_at

    def test_edited_leaves_original_untouched(self):
        comment = make_comment(EventId(uuid4()), UserId(uuid4()), content="Before")

        comment.edited("After")

        assert comment.content == "Before"
        assert comment.is_edited is False

    def test_is_reply(self):
        event_id = EventId(uuid4())
        root = make_comment(event_id, UserId(uuid4()))
        reply = make_comment(event_id, UserId(uuid4()), parent_id=root.id)

        assert root.is_reply is False
        assert reply.is_reply is True


class TestNotification:
    """Tests for Notification."""

    def test_read_marks_copy_read(self):
        notification = make_notification(UserId(uuid4()))

        read = notification.read()

        assert read.is_read is True
        assert notification.is_read is False

    def test_read_on_read_notification_returns_same_instance(self):
        notification = make_notification(UserId(uuid4()), is_read=True)

        assert notification.read() is notification


class TestActor:
    """Tests for Actor roles."""

    @pytest.mark.parametrize(
        "role,can_moderate",
        [
            (Role.USER, False),
            (Role.ADMIN, True),
            (Role.ADMINISTRATOR, True),
        ],
    )
    def test_moderation_roles(self, role, can_moderate):
        assert make_actor(role).can_moderate is can_moderate

    def test_role_parses_backend_spellings(self):
        assert Role("Administrator") is Role.ADMINISTRATOR
        assert Role("admin") is Role.ADMIN
