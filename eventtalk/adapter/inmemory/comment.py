"""In-memory comment gateway for testing and local development."""

from uuid import uuid4

from eventtalk.domain.error import AuthorizationError, RemoteError
from eventtalk.domain.gateway import CommentGateway
from eventtalk.domain.model import Comment, Page
from eventtalk.domain.model.common import utcnow
from eventtalk.domain.value import (
    CommentDraft,
    CommentId,
    EventId,
    OrderDirection,
    OrderField,
    UserId,
)

from .store import InMemoryStore


def _sorted(
    comments: list[Comment], order_by: OrderField, direction: OrderDirection
) -> list[Comment]:
    # Ties keep insertion order, newest last
    ranked = list(enumerate(comments))
    ranked.sort(
        key=lambda pair: (getattr(pair[1], order_by.value), pair[0]),
        reverse=not direction.ascending,
    )
    return [comment for _, comment in ranked]


class InMemoryCommentGateway(CommentGateway):
    """In-memory implementation of CommentGateway for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_comments(
        self,
        event_id: EventId,
        *,
        limit: int = 20,
        offset: int = 0,
        order_by: OrderField = OrderField.CREATED_AT,
        order_direction: OrderDirection = OrderDirection.DESC,
        roots_only: bool = False,
    ) -> Page[Comment]:
        """List comments for an event."""
        comments = [
            c for c in self.store.comments.values() if c.event_id == event_id
        ]
        if roots_only:
            comments = [c for c in comments if c.parent_comment_id is None]

        comments = _sorted(comments, order_by, order_direction)
        items = [
            self.store.with_author(c) for c in comments[offset : offset + limit]
        ]
        return Page[Comment](items=items, total=len(comments))

    async def list_replies(
        self,
        parent_id: CommentId,
        *,
        limit: int = 50,
        order_by: OrderField = OrderField.CREATED_AT,
        order_direction: OrderDirection = OrderDirection.ASC,
    ) -> list[Comment]:
        """List direct replies to a comment."""
        replies = [
            c
            for c in self.store.comments.values()
            if c.parent_comment_id == parent_id
        ]
        replies = _sorted(replies, order_by, order_direction)
        return [self.store.with_author(c) for c in replies[:limit]]

    async def list_user_comments(
        self,
        user_id: UserId,
        *,
        limit: int = 20,
        offset: int = 0,
        order_by: OrderField = OrderField.CREATED_AT,
        order_direction: OrderDirection = OrderDirection.DESC,
    ) -> Page[Comment]:
        """List a user's comments across events, replies included."""
        comments = [c for c in self.store.comments.values() if c.author_id == user_id]
        comments = _sorted(comments, order_by, order_direction)
        items = [
            self.store.with_author(c) for c in comments[offset : offset + limit]
        ]
        return Page[Comment](items=items, total=len(comments))

    async def create_comment(self, draft: CommentDraft) -> Comment:
        """Create a comment authored by the signed-in user.

        Raises:
            AuthorizationError: If nobody is signed in
            RemoteError: If the parent does not exist or belongs to another event
        """
        author = self.store.require_session("create comments")

        if draft.parent_comment_id is not None:
            parent = self.store.comments.get(draft.parent_comment_id)
            if parent is None or parent.event_id != draft.event_id:
                raise RemoteError(
                    "create comment",
                    f"parent comment {draft.parent_comment_id} not found",
                )

        now = utcnow()
        comment = Comment(
            id=CommentId(uuid4()),
            event_id=draft.event_id,
            author_id=author.id,
            content=draft.content.root,
            parent_comment_id=draft.parent_comment_id,
            quoted_text=draft.quote.text if draft.quote else None,
            quoted_comment_id=draft.quote.comment_id if draft.quote else None,
            created_at=now,
            updated_at=now,
        )
        self.store.comments[comment.id] = comment
        await self.store.notify_about(comment)
        return self.store.with_author(comment)

    async def update_comment(self, comment_id: CommentId, content: str) -> Comment:
        """Replace a comment's content.

        Raises:
            AuthorizationError: If the signed-in user is not a moderator
            RemoteError: If the comment does not exist
        """
        self._require_moderator("edit comments")
        comment = self.store.comments.get(comment_id)
        if comment is None:
            raise RemoteError("update comment", f"comment {comment_id} not found")

        updated = comment.edited(content)
        self.store.comments[comment_id] = updated
        return self.store.with_author(updated)

    async def delete_comment(self, comment_id: CommentId) -> None:
        """Delete a comment, its replies and the notifications about them.

        Deleting an unknown comment succeeds, like a filtered DELETE does.

        Raises:
            AuthorizationError: If the signed-in user is not a moderator
        """
        self._require_moderator("delete comments")

        doomed = {comment_id}
        frontier = [comment_id]
        while frontier:
            parent_id = frontier.pop()
            for c in self.store.comments.values():
                if c.parent_comment_id == parent_id and c.id not in doomed:
                    doomed.add(c.id)
                    frontier.append(c.id)

        for doomed_id in doomed:
            self.store.comments.pop(doomed_id, None)
        for n in list(self.store.notifications.values()):
            if n.comment_id in doomed:
                del self.store.notifications[n.id]

    async def count_comments(self, event_id: EventId) -> int:
        """Count all comments of an event, replies included."""
        return sum(1 for c in self.store.comments.values() if c.event_id == event_id)

    def _require_moderator(self, action: str) -> None:
        actor = self.store.require_session(action)
        if not actor.can_moderate:
            raise AuthorizationError(action, str(actor.id))
