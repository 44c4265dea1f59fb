"""
Client shell exceptions.

Every failure surfaced by a store, the gateway or the poller derives from
ShellError, which carries a stable error_code and an optional details dict
(same shape as the backend error payloads, so the UI can show either).

Logical "not found" situations are NOT errors: operations on ids absent from
a local collection are no-ops.
"""
from typing import Optional


class ShellError(Exception):
    """Base exception for client shell errors."""

    def __init__(self, message: str, error_code: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class NotAuthenticated(ShellError):
    """Ownership context missing: raised before any gateway call."""

    def __init__(self, message: str = "User not found", details: Optional[dict] = None):
        super().__init__(message, "NOT_AUTHENTICATED", details)


class RemoteCallFailed(ShellError):
    """Gateway call rejected by the backend or failed at the network level."""

    def __init__(self, command: str, message: str, details: Optional[dict] = None):
        super().__init__(f"{command}: {message}", "REMOTE_CALL_FAILED", details)
        self.command = command

