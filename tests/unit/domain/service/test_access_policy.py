"""Unit tests for AccessPolicy."""

from uuid import uuid4

import pytest

from eventtalk.domain.error import AuthorizationError, ValidationError
from eventtalk.domain.service import AccessPolicy
from eventtalk.domain.value import Role, UserId
from tests.conftest import make_actor


class TestAccessPolicy:
    """Tests for the capability gate."""

    def test_anonymous_cannot_author(self):
        """Creating requires a signed-in actor."""
        with pytest.raises(ValidationError, match="Sign in required"):
            AccessPolicy().ensure_author(None)

    def test_any_signed_in_actor_can_author(self):
        actor = make_actor()

        assert AccessPolicy().ensure_author(actor) is actor

    def test_regular_user_cannot_moderate(self):
        actor = make_actor(Role.USER)

        with pytest.raises(AuthorizationError) as exc_info:
            AccessPolicy().ensure_moderator(actor, "delete comments")

        assert exc_info.value.action == "delete comments"
        assert exc_info.value.user_id == str(actor.id)

    @pytest.mark.parametrize("role", [Role.ADMIN, Role.ADMINISTRATOR])
    def test_admin_roles_can_moderate(self, role):
        actor = make_actor(role)

        assert AccessPolicy().ensure_moderator(actor, "edit comments") is actor

    def test_anonymous_moderation_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            AccessPolicy().ensure_moderator(None, "edit comments")

    def test_recipient_owns_feed(self):
        actor = make_actor()

        assert AccessPolicy().ensure_recipient(actor, actor.id, "read") is actor

    def test_other_user_cannot_touch_feed(self):
        """Even moderators cannot act on someone else's notifications."""
        actor = make_actor(Role.ADMIN)

        with pytest.raises(AuthorizationError):
            AccessPolicy().ensure_recipient(actor, UserId(uuid4()), "read")
