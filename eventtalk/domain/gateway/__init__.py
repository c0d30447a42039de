"""Remote data gateway interfaces.

Interfaces are defined in the domain layer (dependency inversion).
Implementations live in the adapter layer.
"""

from eventtalk.domain.gateway.comment import CommentGateway
from eventtalk.domain.gateway.notification import (
    ErrorHandler,
    InsertHandler,
    NotificationGateway,
)

__all__ = [
    "CommentGateway",
    "ErrorHandler",
    "InsertHandler",
    "NotificationGateway",
]
