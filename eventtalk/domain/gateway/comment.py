"""Comment gateway interface."""

from abc import ABC, abstractmethod

from eventtalk.domain.model.comment import Comment
from eventtalk.domain.model.page import Page
from eventtalk.domain.value import (
    CommentDraft,
    CommentId,
    EventId,
    OrderDirection,
    OrderField,
    UserId,
)


class CommentGateway(ABC):
    """Remote data gateway for comments.

    The backend is the system of record; the thread cache only holds a
    copy. Implementations raise RemoteError for transport failures and
    non-success responses, and AuthorizationError when the backend rejects
    the signed-in user.
    """

    @abstractmethod
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
        """List comments for an event.

        Args:
            event_id: Discussion context
            limit: Maximum number of comments to return
            offset: Number of comments to skip
            order_by: Column to order by
            order_direction: Sort direction
            roots_only: Only return comments without a parent

        Returns:
            Page of comments with the total row count of the query
        """
        pass

    @abstractmethod
    async def list_replies(
        self,
        parent_id: CommentId,
        *,
        limit: int = 50,
        order_by: OrderField = OrderField.CREATED_AT,
        order_direction: OrderDirection = OrderDirection.ASC,
    ) -> list[Comment]:
        """List direct replies to a comment.

        Args:
            parent_id: Parent comment ID
            limit: Maximum number of replies to return
            order_by: Column to order by
            order_direction: Sort direction

        Returns:
            Replies in the requested order
        """
        pass

    @abstractmethod
    async def list_user_comments(
        self,
        user_id: UserId,
        *,
        limit: int = 20,
        offset: int = 0,
        order_by: OrderField = OrderField.CREATED_AT,
        order_direction: OrderDirection = OrderDirection.DESC,
    ) -> Page[Comment]:
        """List comments written by a user across all events (profile page).

        Args:
            user_id: Author
            limit: Maximum number of comments to return
            offset: Number of comments to skip
            order_by: Column to order by
            order_direction: Sort direction

        Returns:
            Page of comments and replies with the total row count
        """
        pass

    @abstractmethod
    async def create_comment(self, draft: CommentDraft) -> Comment:
        """Create a comment authored by the signed-in user.

        Args:
            draft: Validated comment draft

        Returns:
            The canonical comment as stored by the backend
        """
        pass

    @abstractmethod
    async def update_comment(self, comment_id: CommentId, content: str) -> Comment:
        """Replace a comment's content (moderators only).

        Args:
            comment_id: The comment to edit
            content: New, already validated content

        Returns:
            The edited comment
        """
        pass

    @abstractmethod
    async def delete_comment(self, comment_id: CommentId) -> None:
        """Delete a comment (moderators only).

        Args:
            comment_id: The comment to delete
        """
        pass

    @abstractmethod
    async def count_comments(self, event_id: EventId) -> int:
        """Count all comments of an event, replies included."""
        pass
