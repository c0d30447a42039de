"""One page of a remote listing."""

from typing import Generic, TypeVar

from pydantic import Field

from eventtalk.domain.model.common import DomainModel

T = TypeVar("T")


class Page(DomainModel, Generic[T]):
    """Items of one page plus the server's total row count for the query."""

    items: list[T]
    total: int = Field(default=0, ge=0)
