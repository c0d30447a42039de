"""Comment thread cache for one discussion context.

Root comments are paged in from the gateway; replies are fetched per parent
the first time a thread is expanded and indexed by parent id. The two
collections are kept separate so that expanding one branch never refetches
the whole thread.
"""

from collections.abc import Callable
from typing import Optional

import logfire

from eventtalk.domain.error import DomainError
from eventtalk.domain.gateway import CommentGateway
from eventtalk.domain.model import Actor, Comment
from eventtalk.domain.service import AccessPolicy, parse_content
from eventtalk.domain.value import (
    CommentDraft,
    CommentId,
    EventId,
    OrderDirection,
    OrderField,
    Quote,
)

from .pagination import PageCursor
from .reconciliation import (
    ReconcilingCache,
    index_of,
    merge_by_id,
    remove_by_id,
    replace_by_id,
)

CommentCallback = Callable[[Comment], None]
DeletedCallback = Callable[[CommentId], None]


class CommentThreadCache(ReconcilingCache):
    """Client-side copy of an event's comment thread."""

    def __init__(
        self,
        gateway: CommentGateway,
        event_id: EventId,
        *,
        actor: Optional[Actor] = None,
        access_policy: Optional[AccessPolicy] = None,
        page_size: int = 20,
        replies_page_size: int = 50,
        order_by: OrderField = OrderField.CREATED_AT,
        order_direction: OrderDirection = OrderDirection.DESC,
        timeout: Optional[float] = None,
        on_created: Optional[CommentCallback] = None,
        on_updated: Optional[CommentCallback] = None,
        on_deleted: Optional[DeletedCallback] = None,
    ) -> None:
        """Initialize an empty thread cache.

        Args:
            gateway: Remote comment gateway
            event_id: Discussion context this cache mirrors
            actor: Signed-in user, None for anonymous readers
            access_policy: Capability checks (default policy if omitted)
            page_size: Root comments per page
            replies_page_size: Maximum replies fetched per parent
            order_by: Column root comments are ordered by
            order_direction: Direction root comments are ordered in
            timeout: Upper bound in seconds for each remote call
            on_created: Called with each comment this cache created
            on_updated: Called with each comment this cache edited
            on_deleted: Called with the id of each comment this cache deleted
        """
        super().__init__(access_policy or AccessPolicy(), timeout)
        self.gateway = gateway
        self.event_id = event_id
        self.actor = actor
        self.replies_page_size = replies_page_size
        self.order_by = order_by
        self.order_direction = order_direction
        self.on_created = on_created
        self.on_updated = on_updated
        self.on_deleted = on_deleted

        self.total = 0
        self.error: Optional[str] = None

        self._roots: list[Comment] = []
        self._replies: dict[CommentId, list[Comment]] = {}
        # Replies created while their parent's list was still being fetched
        self._early_replies: dict[CommentId, list[Comment]] = {}
        self._cursor = PageCursor(page_size)
        self._loading = False
        self._load_generation = 0
        # Roots created while a load was in flight; a reset page may predate them
        self._created_during_load: set[CommentId] = set()
        self._loading_replies: set[CommentId] = set()
        self._creating = 0
        self._updating: set[CommentId] = set()
        self._deleting: set[CommentId] = set()

    # Read-only state

    @property
    def roots(self) -> list[Comment]:
        return list(self._roots)

    @property
    def replies_by_parent(self) -> dict[CommentId, list[Comment]]:
        return {parent: list(replies) for parent, replies in self._replies.items()}

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def creating(self) -> bool:
        return self._creating > 0

    @property
    def has_more(self) -> bool:
        return self._cursor.has_more

    @property
    def can_moderate(self) -> bool:
        return self.actor is not None and self.actor.can_moderate

    def is_loading_replies(self, parent_id: CommentId) -> bool:
        return parent_id in self._loading_replies

    def is_updating(self, comment_id: CommentId) -> bool:
        return comment_id in self._updating

    def is_deleting(self, comment_id: CommentId) -> bool:
        return comment_id in self._deleting

    def get(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a loaded comment, root or reply."""
        i = index_of(self._roots, comment_id)
        if i is not None:
            return self._roots[i]
        for replies in self._replies.values():
            i = index_of(replies, comment_id)
            if i is not None:
                return replies[i]
        return None

    def get_replies(self, parent_id: CommentId) -> list[Comment]:
        """Loaded replies of a comment; empty until load_replies has run."""
        return list(self._replies.get(parent_id, []))

    # Loading

    async def load_roots(self, reset: bool = False) -> None:
        """Fetch the next page of root comments, or the first page on reset.

        A load already in flight suppresses further non-reset loads. A reset
        supersedes any load in flight; the superseded result is dropped.
        Failures set ``error`` and leave the loaded comments untouched.
        """
        if self._closed or (self._loading and not reset):
            return

        self._load_generation += 1
        generation = self._load_generation
        page_index = self._cursor.start(reset)
        self._loading = True
        self._created_during_load.clear()
        self.error = None

        with logfire.span(
            "comment_thread.load_roots",
            event_id=str(self.event_id),
            page=page_index,
            reset=reset,
        ):
            try:
                page = await self._call(
                    "load comments",
                    self.gateway.list_comments(
                        self.event_id,
                        limit=self._cursor.page_size,
                        offset=self._cursor.offset_of(page_index),
                        order_by=self.order_by,
                        order_direction=self.order_direction,
                        roots_only=True,
                    ),
                )
            except DomainError as e:
                logfire.error(
                    "Failed to load comments",
                    event_id=str(self.event_id),
                    error=str(e),
                )
                if self._is_current_load(generation):
                    self.error = str(e)
                return
            finally:
                # Cleared on cancellation and unexpected errors too
                if generation == self._load_generation:
                    self._loading = False

            if not self._is_current_load(generation):
                logfire.info(
                    "Discarding superseded comment page",
                    event_id=str(self.event_id),
                    page=page_index,
                )
                return

            base = [] if reset else self._roots
            carried = [c for c in self._roots if c.id in self._created_during_load]
            self._roots = merge_by_id(base, page.items, skip=self._tombstones)
            self.total = page.total
            for comment in carried:
                if index_of(self._roots, comment.id) is None:
                    self._insert_root(comment)
            self._created_during_load.clear()
            self._cursor.complete(page_index, len(page.items))
            logfire.info(
                "Comments loaded",
                event_id=str(self.event_id),
                count=len(page.items),
                total=page.total,
            )

    async def load_more(self) -> None:
        """Fetch the next page unless a load is running or nothing is left."""
        if self._loading or not self._cursor.has_more:
            return
        await self.load_roots()

    async def refresh(self) -> None:
        await self.load_roots(reset=True)

    def _is_current_load(self, generation: int) -> bool:
        return not self._closed and generation == self._load_generation

    async def load_replies(self, parent_id: CommentId) -> None:
        """Fetch all replies of a comment, oldest first.

        No-op when the replies are already loaded or being loaded. Later
        replies created through this cache are appended locally.
        """
        if (
            self._closed
            or parent_id in self._loading_replies
            or parent_id in self._replies
        ):
            return

        with (
            self._pending(self._loading_replies, parent_id),
            logfire.span("comment_thread.load_replies", parent_id=str(parent_id)),
        ):
            try:
                replies = await self._call(
                    "load replies",
                    self.gateway.list_replies(
                        parent_id,
                        limit=self.replies_page_size,
                        order_by=OrderField.CREATED_AT,
                        order_direction=OrderDirection.ASC,
                    ),
                )
            except DomainError as e:
                logfire.error(
                    "Failed to load replies", parent_id=str(parent_id), error=str(e)
                )
                self._early_replies.pop(parent_id, None)
                if not self._closed:
                    self.error = str(e)
                return

            early = self._early_replies.pop(parent_id, [])
            if self._closed or parent_id in self._tombstones:
                return

            self._replies[parent_id] = merge_by_id(
                merge_by_id([], replies, skip=self._tombstones),
                early,
                skip=self._tombstones,
            )
            logfire.info(
                "Replies loaded", parent_id=str(parent_id), count=len(replies)
            )

    # Mutations

    async def create(
        self,
        content: str,
        parent_id: Optional[CommentId] = None,
        quote: Optional[Quote] = None,
    ) -> Comment:
        """Create a comment or a reply as the signed-in actor.

        Args:
            content: Raw comment text; stripped before it is sent
            parent_id: Comment being replied to, None for a root comment
            quote: Fragment of another comment to quote

        Returns:
            The comment as stored by the backend

        Raises:
            ValidationError: If nobody is signed in or the content is invalid
            RemoteError: If the backend call fails
        """
        self.access_policy.ensure_author(self.actor)
        draft = CommentDraft(
            event_id=self.event_id,
            content=parse_content(content),
            parent_comment_id=parent_id,
            quote=quote,
        )

        self._creating += 1
        try:
            with logfire.span(
                "comment_thread.create",
                event_id=str(self.event_id),
                parent_id=str(parent_id) if parent_id else None,
                content_length=len(draft.content.root),
            ):
                try:
                    comment = await self._call(
                        "create comment", self.gateway.create_comment(draft)
                    )
                except DomainError as e:
                    logfire.error(
                        "Failed to create comment",
                        event_id=str(self.event_id),
                        error=str(e),
                    )
                    raise
        finally:
            self._creating -= 1

        if self._closed:
            return comment

        self._insert_created(comment)
        logfire.info(
            "Comment created",
            comment_id=str(comment.id),
            event_id=str(self.event_id),
            is_reply=comment.is_reply,
        )
        if self.on_created:
            self.on_created(comment)
        return comment

    def _insert_created(self, comment: Comment) -> None:
        if comment.id in self._tombstones:
            return

        parent_id = comment.parent_comment_id
        if parent_id is None:
            if index_of(self._roots, comment.id) is not None:
                return
            self._insert_root(comment)
            if self._loading:
                self._created_during_load.add(comment.id)
        elif parent_id in self._replies:
            self._replies[parent_id] = merge_by_id(self._replies[parent_id], [comment])
        elif parent_id in self._loading_replies:
            self._early_replies.setdefault(parent_id, []).append(comment)
        # Otherwise the reply arrives with the first load_replies(parent_id)

    def _insert_root(self, comment: Comment) -> None:
        if self.order_direction.ascending:
            self._roots.append(comment)
        else:
            self._roots.insert(0, comment)
        self.total += 1

    async def update(self, comment_id: CommentId, content: str) -> Optional[Comment]:
        """Edit a comment's content (moderators only).

        Returns:
            The edited comment, or None if an edit of this comment is already
            in flight

        Raises:
            ValidationError: If nobody is signed in or the content is invalid
            AuthorizationError: If the actor is not a moderator
            RemoteError: If the backend call fails
        """
        self.access_policy.ensure_moderator(self.actor, "edit comments")
        new_content = parse_content(content)

        if comment_id in self._updating:
            logfire.info("Edit already in flight", comment_id=str(comment_id))
            return None

        with (
            self._pending(self._updating, comment_id),
            logfire.span("comment_thread.update", comment_id=str(comment_id)),
        ):
            try:
                updated = await self._call(
                    "update comment",
                    self.gateway.update_comment(comment_id, new_content.root),
                )
            except DomainError as e:
                logfire.error(
                    "Failed to update comment",
                    comment_id=str(comment_id),
                    error=str(e),
                )
                raise

        if not updated.is_edited:
            updated = updated.model_copy(update={"is_edited": True})

        # A delete confirmed meanwhile wins: replace never re-inserts
        if self._closed or comment_id in self._tombstones:
            return updated

        replaced = replace_by_id(self._roots, updated)
        for replies in self._replies.values():
            replaced = replace_by_id(replies, updated) or replaced
        logfire.info(
            "Comment updated", comment_id=str(comment_id), cached=replaced
        )
        if self.on_updated:
            self.on_updated(updated)
        return updated

    async def delete(self, comment_id: CommentId) -> bool:
        """Delete a comment (moderators only).

        Returns:
            True once the backend confirmed the delete, False if a delete of
            this comment is already in flight

        Raises:
            ValidationError: If nobody is signed in
            AuthorizationError: If the actor is not a moderator
            RemoteError: If the backend call fails
        """
        self.access_policy.ensure_moderator(self.actor, "delete comments")

        if comment_id in self._deleting:
            logfire.info("Delete already in flight", comment_id=str(comment_id))
            return False

        with (
            self._pending(self._deleting, comment_id),
            logfire.span("comment_thread.delete", comment_id=str(comment_id)),
        ):
            try:
                await self._call(
                    "delete comment", self.gateway.delete_comment(comment_id)
                )
            except DomainError as e:
                logfire.error(
                    "Failed to delete comment",
                    comment_id=str(comment_id),
                    error=str(e),
                )
                raise

        if self._closed:
            return True

        self._forget(comment_id)
        logfire.info("Comment deleted", comment_id=str(comment_id))
        if self.on_deleted:
            self.on_deleted(comment_id)
        return True

    def _forget(self, comment_id: CommentId) -> None:
        self._tombstones.add(comment_id)
        if remove_by_id(self._roots, comment_id) is not None:
            self.total = max(0, self.total - 1)
        for replies in self._replies.values():
            remove_by_id(replies, comment_id)
        self._replies.pop(comment_id, None)
        self._early_replies.pop(comment_id, None)

    async def count_comments(self) -> int:
        """Authoritative number of comments on the event, replies included."""
        with logfire.span("comment_thread.count", event_id=str(self.event_id)):
            return await self._call(
                "count comments", self.gateway.count_comments(self.event_id)
            )
