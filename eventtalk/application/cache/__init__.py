"""Client-side caches for comment threads and notification feeds."""

from .comment_thread import CommentThreadCache
from .factory import CommentThreadCacheFactory, NotificationFeedCacheFactory
from .notification_feed import NotificationFeedCache
from .pagination import PageCursor
from .reconciliation import ReconcilingCache, merge_by_id

__all__ = [
    "CommentThreadCache",
    "CommentThreadCacheFactory",
    "NotificationFeedCache",
    "NotificationFeedCacheFactory",
    "PageCursor",
    "ReconcilingCache",
    "merge_by_id",
]
