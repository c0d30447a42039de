"""Adapter layer errors."""

from eventtalk.domain.error import RemoteError


class AdapterError(Exception):
    """Base adapter error."""

    pass


class PostgrestError(AdapterError, RemoteError):
    """Failed or rejected request to the PostgREST backend."""

    def __init__(self, operation: str, reason: str, status_code: int | None = None):
        self.status_code = status_code
        if status_code is not None:
            reason = f"HTTP {status_code}: {reason}"
        RemoteError.__init__(self, operation, reason)
