"""Domain layer errors.

Every failure the sync engine can report is one of these. None of them is
fatal: callers recover at the UI boundary.
"""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Input rejected locally, before any remote call.

    Raised for empty or over-length content and for operations that need a
    signed-in actor when there is none.
    """

    pass


class AuthorizationError(DomainError):
    """Raised when an actor lacks the capability an operation requires."""

    def __init__(self, action: str, user_id: str | None = None):
        self.action = action
        self.user_id = user_id
        who = f"User {user_id}" if user_id else "Anonymous user"
        super().__init__(f"{who} is not allowed to {action}")


class RemoteError(DomainError):
    """Network failure, timeout, or non-success response from the gateway."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class ReconciliationConflict(DomainError):
    """A pushed record could not be dereferenced or does not belong here.

    Always handled by ignoring the record.
    """

    def __init__(self, resource: str, identifier: str, reason: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"Ignoring pushed {resource} {identifier}: {reason}")
