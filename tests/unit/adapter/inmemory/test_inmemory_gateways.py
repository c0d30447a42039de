"""Unit tests for the in-memory gateways and their notification trigger."""

from uuid import uuid4

import pytest

from eventtalk.adapter.inmemory import (
    InMemoryCommentGateway,
    InMemoryNotificationGateway,
    InMemoryStore,
)
from eventtalk.domain.error import AuthorizationError, RemoteError
from eventtalk.domain.gateway import CommentGateway, NotificationGateway
from eventtalk.domain.value import (
    CommentContent,
    CommentDraft,
    EventId,
    NotificationKind,
    OrderDirection,
    Quote,
    Role,
)
from tests.conftest import make_actor, make_comment, make_notification, minutes_ago
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


def _draft(event_id, content="Hello", parent_id=None, quote=None):
    return CommentDraft(
        event_id=event_id,
        content=CommentContent(content),
        parent_comment_id=parent_id,
        quote=quote,
    )


class TestInMemoryCommentGateway:
    """Tests for InMemoryCommentGateway."""

    @pytest.mark.asyncio
    async def test_container_provides_in_memory_gateways(self, unit_env):
        comments = await unit_env.get(CommentGateway)
        notifications = await unit_env.get(NotificationGateway)
        store = await unit_env.get(InMemoryStore)

        assert isinstance(comments, InMemoryCommentGateway)
        assert isinstance(notifications, InMemoryNotificationGateway)
        assert comments.store is store
        assert notifications.store is store

    @pytest.mark.asyncio
    async def test_create_requires_session(self):
        gateway = InMemoryCommentGateway(InMemoryStore())

        with pytest.raises(AuthorizationError):
            await gateway.create_comment(_draft(EventId(uuid4())))

    @pytest.mark.asyncio
    async def test_create_takes_author_from_session(self):
        # Arrange
        store = InMemoryStore()
        author = make_actor(Role.ADMIN, name="Ada")
        store.sign_in(author)
        gateway = InMemoryCommentGateway(store)

        # Act
        comment = await gateway.create_comment(_draft(EventId(uuid4())))

        # Assert
        assert comment.author_id == author.id
        assert comment.author_name == "Ada"
        assert comment.author_role == "admin"
        assert comment.id in store.comments

    @pytest.mark.asyncio
    async def test_reply_to_missing_parent_fails(self):
        store = InMemoryStore()
        store.sign_in(make_actor())
        gateway = InMemoryCommentGateway(store)

        with pytest.raises(RemoteError):
            await gateway.create_comment(_draft(EventId(uuid4()), parent_id=uuid4()))

    @pytest.mark.asyncio
    async def test_reply_to_parent_of_other_event_fails(self):
        store = InMemoryStore()
        actor = make_actor()
        store.sign_in(actor)
        parent = make_comment(EventId(uuid4()), actor.id)
        store.comments[parent.id] = parent
        gateway = InMemoryCommentGateway(store)

        with pytest.raises(RemoteError):
            await gateway.create_comment(
                _draft(EventId(uuid4()), parent_id=parent.id)
            )

    @pytest.mark.asyncio
    async def test_list_comments_orders_and_counts(self):
        # Arrange
        store = InMemoryStore()
        event_id = EventId(uuid4())
        author = make_actor()
        old = make_comment(event_id, author.id, created_at=minutes_ago(10))
        new = make_comment(event_id, author.id, created_at=minutes_ago(1))
        reply = make_comment(event_id, author.id, parent_id=old.id)
        other_event = make_comment(EventId(uuid4()), author.id)
        for c in (new, old, reply, other_event):
            store.comments[c.id] = c
        gateway = InMemoryCommentGateway(store)

        # Act
        everything = await gateway.list_comments(event_id)
        roots = await gateway.list_comments(
            event_id, roots_only=True, order_direction=OrderDirection.ASC
        )
        second_page = await gateway.list_comments(
            event_id, roots_only=True, limit=1, offset=1
        )

        # Assert
        assert everything.total == 3
        assert [c.id for c in roots.items] == [old.id, new.id]
        assert roots.total == 2
        assert [c.id for c in second_page.items] == [old.id]
        assert second_page.total == 2

    @pytest.mark.asyncio
    async def test_list_user_comments_spans_events(self):
        # Arrange
        store = InMemoryStore()
        author = store.add_profile(make_actor(name="Ada"))
        someone_else = make_actor()
        first_event, second_event = EventId(uuid4()), EventId(uuid4())
        old = make_comment(first_event, author.id, created_at=minutes_ago(10))
        reply = make_comment(
            second_event, author.id, parent_id=uuid4(), created_at=minutes_ago(5)
        )
        new = make_comment(second_event, author.id, created_at=minutes_ago(1))
        foreign = make_comment(first_event, someone_else.id)
        for c in (old, reply, new, foreign):
            store.comments[c.id] = c
        gateway = InMemoryCommentGateway(store)

        # Act
        newest = await gateway.list_user_comments(author.id)
        oldest_second = await gateway.list_user_comments(
            author.id, limit=1, offset=1, order_direction=OrderDirection.ASC
        )

        # Assert
        assert [c.id for c in newest.items] == [new.id, reply.id, old.id]
        assert newest.total == 3
        assert newest.items[0].author_name == "Ada"
        assert [c.id for c in oldest_second.items] == [reply.id]
        assert oldest_second.total == 3

    @pytest.mark.asyncio
    async def test_update_and_delete_are_moderator_only(self):
        # Arrange
        store = InMemoryStore()
        user = make_actor()
        store.sign_in(user)
        comment = make_comment(EventId(uuid4()), user.id)
        store.comments[comment.id] = comment
        gateway = InMemoryCommentGateway(store)

        # Act / Assert
        with pytest.raises(AuthorizationError):
            await gateway.update_comment(comment.id, "Mine anyway")
        with pytest.raises(AuthorizationError):
            await gateway.delete_comment(comment.id)
        assert store.comments[comment.id] == comment

    @pytest.mark.asyncio
    async def test_update_marks_edited(self):
        store = InMemoryStore()
        store.sign_in(make_actor(Role.ADMINISTRATOR))
        comment = make_comment(EventId(uuid4()), make_actor().id)
        store.comments[comment.id] = comment
        gateway = InMemoryCommentGateway(store)

        updated = await gateway.update_comment(comment.id, "Moderated")

        assert updated.is_edited is True
        assert store.comments[comment.id].content == "Moderated"

    @pytest.mark.asyncio
    async def test_update_missing_comment_fails(self):
        store = InMemoryStore()
        store.sign_in(make_actor(Role.ADMIN))
        gateway = InMemoryCommentGateway(store)

        with pytest.raises(RemoteError):
            await gateway.update_comment(uuid4(), "Nothing here")

    @pytest.mark.asyncio
    async def test_delete_cascades_to_replies_and_notifications(self):
        # Arrange
        store = InMemoryStore()
        event_id = EventId(uuid4())
        author, replier = make_actor(), make_actor()
        root = make_comment(event_id, author.id)
        store.comments[root.id] = root
        store.sign_in(replier)
        gateway = InMemoryCommentGateway(store)
        reply = await gateway.create_comment(_draft(event_id, parent_id=root.id))
        assert len(store.notifications) == 1

        # Act
        store.sign_in(make_actor(Role.ADMIN))
        await gateway.delete_comment(root.id)

        # Assert
        assert root.id not in store.comments
        assert reply.id not in store.comments
        assert store.notifications == {}
        assert await gateway.count_comments(event_id) == 0


class TestNotificationTrigger:
    """Tests for the notifications raised by new comments."""

    @pytest.mark.asyncio
    async def test_reply_notifies_parent_author(self):
        # Arrange
        store = InMemoryStore()
        event_id = EventId(uuid4())
        author, replier = make_actor(), make_actor()
        root = make_comment(event_id, author.id)
        store.comments[root.id] = root
        store.sign_in(replier)
        pushed = []

        async def on_insert(payload):
            pushed.append(payload)

        store.broker.subscribe(author.id, on_insert, lambda e: None)

        # Act
        reply = await InMemoryCommentGateway(store).create_comment(
            _draft(event_id, parent_id=root.id)
        )

        # Assert
        (notification,) = store.notifications.values()
        assert notification.kind == NotificationKind.REPLY
        assert notification.recipient_id == author.id
        assert notification.sender_id == replier.id
        assert notification.comment_id == reply.id
        assert pushed == [
            {"id": str(notification.id), "recipient_id": str(author.id)}
        ]

    @pytest.mark.asyncio
    async def test_quote_notifies_quoted_author(self):
        store = InMemoryStore()
        event_id = EventId(uuid4())
        author, quoter = make_actor(), make_actor()
        quoted = make_comment(event_id, author.id, content="Original claim")
        store.comments[quoted.id] = quoted
        store.sign_in(quoter)

        await InMemoryCommentGateway(store).create_comment(
            _draft(event_id, quote=Quote(text="claim", comment_id=quoted.id))
        )

        (notification,) = store.notifications.values()
        assert notification.kind == NotificationKind.MENTION
        assert notification.recipient_id == author.id

    @pytest.mark.asyncio
    async def test_reply_quoting_parent_raises_one_notification(self):
        store = InMemoryStore()
        event_id = EventId(uuid4())
        author, replier = make_actor(), make_actor()
        root = make_comment(event_id, author.id)
        store.comments[root.id] = root
        store.sign_in(replier)

        await InMemoryCommentGateway(store).create_comment(
            _draft(
                event_id,
                parent_id=root.id,
                quote=Quote(text="quoted", comment_id=root.id),
            )
        )

        (notification,) = store.notifications.values()
        assert notification.kind == NotificationKind.REPLY

    @pytest.mark.asyncio
    async def test_replying_to_yourself_raises_nothing(self):
        store = InMemoryStore()
        event_id = EventId(uuid4())
        author = make_actor()
        root = make_comment(event_id, author.id)
        store.comments[root.id] = root
        store.sign_in(author)

        await InMemoryCommentGateway(store).create_comment(
            _draft(event_id, parent_id=root.id)
        )

        assert store.notifications == {}


class TestInMemoryNotificationGateway:
    """Tests for InMemoryNotificationGateway."""

    @pytest.mark.asyncio
    async def test_list_filters_and_orders(self):
        # Arrange
        store = InMemoryStore()
        recipient = make_actor()
        old = make_notification(recipient.id, created_at=minutes_ago(5))
        new = make_notification(
            recipient.id, created_at=minutes_ago(1), kind=NotificationKind.MENTION
        )
        read = make_notification(recipient.id, is_read=True, created_at=minutes_ago(3))
        foreign = make_notification(make_actor().id)
        for n in (old, new, read, foreign):
            store.notifications[n.id] = n
        gateway = InMemoryNotificationGateway(store)

        # Act
        everything = await gateway.list_notifications(recipient.id)
        unread = await gateway.list_notifications(recipient.id, unread_only=True)
        mentions = await gateway.list_notifications(
            recipient.id, kind=NotificationKind.MENTION
        )

        # Assert
        assert [n.id for n in everything.items] == [new.id, read.id, old.id]
        assert everything.total == 3
        assert unread.total == 2
        assert [n.id for n in mentions.items] == [new.id]

    @pytest.mark.asyncio
    async def test_mark_all_read_only_touches_recipient(self):
        store = InMemoryStore()
        recipient, other = make_actor(), make_actor()
        mine = make_notification(recipient.id)
        theirs = make_notification(other.id)
        store.notifications[mine.id] = mine
        store.notifications[theirs.id] = theirs
        gateway = InMemoryNotificationGateway(store)

        await gateway.mark_all_read(recipient.id)

        assert await gateway.count_unread(recipient.id) == 0
        assert await gateway.count_unread(other.id) == 1

    @pytest.mark.asyncio
    async def test_get_missing_notification_returns_none(self):
        gateway = InMemoryNotificationGateway(InMemoryStore())

        assert await gateway.get_notification(uuid4()) is None

    @pytest.mark.asyncio
    async def test_has_unread_since(self):
        store = InMemoryStore()
        recipient = make_actor()
        n = make_notification(recipient.id, created_at=minutes_ago(5))
        store.notifications[n.id] = n
        gateway = InMemoryNotificationGateway(store)

        assert await gateway.has_unread_since(recipient.id, minutes_ago(10)) is True
        assert await gateway.has_unread_since(recipient.id, minutes_ago(1)) is False
        await gateway.mark_read(n.id)
        assert await gateway.has_unread_since(recipient.id, minutes_ago(10)) is False
