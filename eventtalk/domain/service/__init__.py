"""Domain services."""

from .access_policy import AccessPolicy
from .base import Service
from .content import parse_content

__all__ = [
    "AccessPolicy",
    "Service",
    "parse_content",
]
