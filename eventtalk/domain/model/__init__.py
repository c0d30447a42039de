"""Domain model entities for eventtalk."""

from eventtalk.domain.model.actor import Actor
from eventtalk.domain.model.comment import Comment
from eventtalk.domain.model.notification import Notification
from eventtalk.domain.model.page import Page

__all__ = [
    "Actor",
    "Comment",
    "Notification",
    "Page",
]
