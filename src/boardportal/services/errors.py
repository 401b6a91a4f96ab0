"""
Service Errors

Failures surfaced to the portal user. Storage-level exceptions are wrapped
so callers handle one type regardless of the underlying driver error.
"""


class RemoteOperationError(Exception):
    """A backend read/write failed; local state was left unchanged"""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to {operation}: {str(cause) or 'Check connection'}")


class SessionDeniedError(Exception):
    """The account may not open a portal session (status is not Active)"""

    def __init__(self, status: str):
        self.status = status
        super().__init__(
            f"Access denied. Your account status is: {status}. "
            "Please contact the administrator."
        )


class SessionNotFoundError(Exception):
    """No active portal session for the user"""
