"""Offset pagination cursor shared by the comment and notification caches."""

from dataclasses import dataclass


@dataclass
class PageCursor:
    """Tracks which page to request next and whether more pages exist.

    A load captures its page index with ``start`` before awaiting the
    gateway and reports back with ``complete``, so a superseded load never
    moves the cursor.
    """

    page_size: int
    page: int = 0
    has_more: bool = True

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError("page_size must be positive")

    def start(self, reset: bool = False) -> int:
        """Page index the next load should fetch."""
        return 0 if reset else self.page

    def offset_of(self, page: int) -> int:
        return page * self.page_size

    def complete(self, page: int, received: int) -> None:
        """Record a successful load of ``page`` that returned ``received`` rows.

        A short page means the listing is exhausted.
        """
        self.page = page + 1
        self.has_more = received >= self.page_size

    def reset(self) -> None:
        self.page = 0
        self.has_more = True
