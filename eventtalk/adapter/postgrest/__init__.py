"""PostgREST gateway implementations."""

from eventtalk.adapter.postgrest.client import PostgrestClient, parse_content_range
from eventtalk.adapter.postgrest.comment import PostgrestCommentGateway
from eventtalk.adapter.postgrest.notification import PostgrestNotificationGateway

__all__ = [
    "PostgrestClient",
    "PostgrestCommentGateway",
    "PostgrestNotificationGateway",
    "parse_content_range",
]
