"""Shared reconciliation logic for the client-side caches.

Both caches apply local changes on a single event loop while remote calls
and push events complete in arbitrary order. The helpers here provide the
guarantees they rely on:

- merge by id: an id is never inserted twice, and deleted ids stay deleted
- per-entity pending sets: a second mutation of the same entity while one
  is in flight is ignored
- bounded remote calls: a gateway call that exceeds the timeout is a
  RemoteError
- teardown: once closed, results of in-flight calls are discarded
"""

import asyncio
from collections.abc import Awaitable, Collection, Hashable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Optional, Protocol, TypeVar

import logfire

from eventtalk.domain.error import RemoteError
from eventtalk.domain.service import AccessPolicy


class Identified(Protocol):
    @property
    def id(self) -> Any: ...


E = TypeVar("E", bound=Identified)
R = TypeVar("R")


def index_of(items: list[E], entity_id: Hashable) -> Optional[int]:
    """Position of the entity with ``entity_id``, or None."""
    for i, item in enumerate(items):
        if item.id == entity_id:
            return i
    return None


def merge_by_id(
    existing: list[E],
    incoming: Iterable[E],
    *,
    skip: Collection[Hashable] = (),
) -> list[E]:
    """Append incoming entities whose id is not present yet.

    Entities already held keep their position and value; incoming
    duplicates (within the batch too) and ids in ``skip`` are dropped.

    Returns:
        A new list; ``existing`` is not modified
    """
    merged = list(existing)
    seen = {item.id for item in merged}
    for item in incoming:
        if item.id in seen or item.id in skip:
            continue
        seen.add(item.id)
        merged.append(item)
    return merged


def replace_by_id(items: list[E], entity: E) -> bool:
    """Replace the entity with the same id in place.

    Returns:
        Whether an entity was replaced
    """
    i = index_of(items, entity.id)
    if i is None:
        return False
    items[i] = entity
    return True


def remove_by_id(items: list[E], entity_id: Hashable) -> Optional[E]:
    """Remove and return the entity with ``entity_id``, if held."""
    i = index_of(items, entity_id)
    if i is None:
        return None
    return items.pop(i)


class ReconcilingCache:
    """Base class for caches that reconcile local state with a remote gateway."""

    def __init__(
        self,
        access_policy: AccessPolicy,
        timeout: Optional[float] = None,
    ) -> None:
        """Initialize reconciliation state.

        Args:
            access_policy: Capability checks for mutations
            timeout: Upper bound in seconds for each remote call, None for no bound
        """
        self.access_policy = access_policy
        self.timeout = timeout
        self._closed = False
        self._tombstones: set[Any] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    async def _call(self, operation: str, call: Awaitable[R]) -> R:
        """Await a gateway call, bounded by the cache timeout.

        Raises:
            RemoteError: If the call times out or the gateway reports a failure
        """
        if self.timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, self.timeout)
        except asyncio.TimeoutError as e:
            logfire.error(
                "Remote call timed out", operation=operation, timeout=self.timeout
            )
            raise RemoteError(operation, f"timed out after {self.timeout}s") from e

    @contextmanager
    def _pending(self, flags: set[Any], key: Any) -> Iterator[None]:
        """Mark ``key`` in flight for the duration of the block."""
        flags.add(key)
        try:
            yield
        finally:
            flags.discard(key)

    async def close(self) -> None:
        """Tear the cache down.

        Idempotent. In-flight calls still complete on the network side but
        their results are no longer applied.
        """
        if self._closed:
            return
        self._closed = True
        await self._on_close()
        logfire.info("Cache closed", cache=type(self).__name__)

    async def _on_close(self) -> None:
        """Release long-lived resources. Subclasses override."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
