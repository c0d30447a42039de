"""PostgREST-backed comment gateway."""

from eventtalk.adapter.error import PostgrestError
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

from .client import PostgrestClient
from .mappers import COMMENT_SELECT, draft_to_row, row_to_comment

TABLE = "event_comments"


def _order(order_by: OrderField, direction: OrderDirection) -> str:
    return f"{order_by.value}.{direction.value}"


class PostgrestCommentGateway(CommentGateway):
    """CommentGateway over the event_comments table."""

    def __init__(self, client: PostgrestClient) -> None:
        self.client = client

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
        params = {
            "select": COMMENT_SELECT,
            "event_id": f"eq.{event_id}",
            "order": _order(order_by, order_direction),
            "limit": str(limit),
            "offset": str(offset),
        }
        if roots_only:
            params["parent_comment_id"] = "is.null"

        rows, total = await self.client.select(
            TABLE, "load comments", params, count=True
        )
        items = [row_to_comment(row) for row in rows]
        return Page[Comment](
            items=items, total=total if total is not None else offset + len(items)
        )

    async def list_replies(
        self,
        parent_id: CommentId,
        *,
        limit: int = 50,
        order_by: OrderField = OrderField.CREATED_AT,
        order_direction: OrderDirection = OrderDirection.ASC,
    ) -> list[Comment]:
        rows, _ = await self.client.select(
            TABLE,
            "load replies",
            {
                "select": COMMENT_SELECT,
                "parent_comment_id": f"eq.{parent_id}",
                "order": _order(order_by, order_direction),
                "limit": str(limit),
            },
        )
        return [row_to_comment(row) for row in rows]

    async def list_user_comments(
        self,
        user_id: UserId,
        *,
        limit: int = 20,
        offset: int = 0,
        order_by: OrderField = OrderField.CREATED_AT,
        order_direction: OrderDirection = OrderDirection.DESC,
    ) -> Page[Comment]:
        rows, total = await self.client.select(
            TABLE,
            "load user comments",
            {
                "select": COMMENT_SELECT,
                "user_id": f"eq.{user_id}",
                "order": _order(order_by, order_direction),
                "limit": str(limit),
                "offset": str(offset),
            },
            count=True,
        )
        items = [row_to_comment(row) for row in rows]
        return Page[Comment](
            items=items, total=total if total is not None else offset + len(items)
        )

    async def create_comment(self, draft: CommentDraft) -> Comment:
        author_id = await self.client.current_user_id("create comment")
        row = await self.client.insert(
            TABLE,
            "create comment",
            draft_to_row(draft, author_id),
            select=COMMENT_SELECT,
        )
        return row_to_comment(row)

    async def update_comment(self, comment_id: CommentId, content: str) -> Comment:
        now = utcnow().isoformat()
        rows = await self.client.update(
            TABLE,
            "update comment",
            {"id": f"eq.{comment_id}"},
            {
                "content": content,
                "is_edited": True,
                "edited_at": now,
                "updated_at": now,
            },
            select=COMMENT_SELECT,
        )
        # Row level security hides rows the user may not edit
        if not rows:
            raise PostgrestError(
                "update comment", f"comment {comment_id} not found or not editable"
            )
        return row_to_comment(rows[0])

    async def delete_comment(self, comment_id: CommentId) -> None:
        await self.client.delete(TABLE, "delete comment", {"id": f"eq.{comment_id}"})

    async def count_comments(self, event_id: EventId) -> int:
        return await self.client.count(
            TABLE, "count comments", {"select": "id", "event_id": f"eq.{event_id}"}
        )
