"""In-memory gateway implementations for testing and local development."""

from eventtalk.adapter.inmemory.comment import InMemoryCommentGateway
from eventtalk.adapter.inmemory.notification import InMemoryNotificationGateway
from eventtalk.adapter.inmemory.store import InMemoryStore

__all__ = [
    "InMemoryCommentGateway",
    "InMemoryNotificationGateway",
    "InMemoryStore",
]
