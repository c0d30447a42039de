"""Capability checks for mutation-class operations."""

from typing import Optional

import logfire

from eventtalk.domain.error import AuthorizationError, ValidationError
from eventtalk.domain.model.actor import Actor
from eventtalk.domain.value import UserId

from .base import Service


class AccessPolicy(Service):
    """Decides locally whether an actor may issue a mutation.

    Checks run before any remote call. The backend enforces the same rules
    again, so passing here is necessary but not sufficient.
    """

    def require_actor(self, actor: Optional[Actor], action: str) -> Actor:
        """Ensure somebody is signed in.

        Args:
            actor: Current actor, None when anonymous
            action: Human readable action, used in the error message

        Returns:
            The actor

        Raises:
            ValidationError: If nobody is signed in
        """
        if actor is None:
            logfire.warn("Anonymous actor rejected", action=action)
            raise ValidationError(f"Sign in required to {action}")
        return actor

    def ensure_author(self, actor: Optional[Actor]) -> Actor:
        """Any signed-in actor may author comments."""
        return self.require_actor(actor, "comment")

    def ensure_moderator(self, actor: Optional[Actor], action: str) -> Actor:
        """Ensure the actor holds a moderator role.

        Raises:
            ValidationError: If nobody is signed in
            AuthorizationError: If the actor is not a moderator
        """
        actor = self.require_actor(actor, action)
        if not actor.can_moderate:
            logfire.warn(
                "Moderator capability missing",
                action=action,
                user_id=str(actor.id),
                role=actor.role.value,
            )
            raise AuthorizationError(action, str(actor.id))
        return actor

    def ensure_recipient(
        self, actor: Optional[Actor], recipient_id: UserId, action: str
    ) -> Actor:
        """Ensure the actor owns the notification feed.

        Raises:
            ValidationError: If nobody is signed in
            AuthorizationError: If the actor is not the recipient
        """
        actor = self.require_actor(actor, action)
        if actor.id != recipient_id:
            logfire.warn(
                "Actor is not the feed recipient",
                action=action,
                user_id=str(actor.id),
                recipient_id=str(recipient_id),
            )
            raise AuthorizationError(action, str(actor.id))
        return actor
