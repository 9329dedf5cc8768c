"""
Error taxonomy shared by services and routers.

Every error carries a user-facing ``message``. Routers translate these into
HTTP responses; services never raise HTTPException themselves.
"""

from typing import Optional


class ToneError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ToneError):
    """Required configuration is missing or invalid. Fatal at startup."""


class InvalidInput(ToneError):
    """Input rejected locally, before any network call."""


class UsernameTakenError(ToneError):
    """The store rejected a profile write because the username is in use."""

    def __init__(self, message: str = "That username is already taken.") -> None:
        super().__init__(message)


class RemoteError(ToneError):
    """A call to the remote service failed.

    ``message`` is what the user sees; ``detail`` and ``code`` keep the
    provider's own message and error code (e.g. Postgres ``23505``).
    """

    def __init__(
        self,
        message: str,
        operation: str = "",
        code: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.code = code
        self.detail = detail if detail is not None else message

    def with_message(self, message: str) -> "RemoteError":
        """Return a copy carrying a different user-facing message."""
        return RemoteError(message, operation=self.operation, code=self.code, detail=self.detail)


class NotAuthenticated(ToneError):
    def __init__(self, message: str = "Sign in to continue.") -> None:
        super().__init__(message)


class NotFound(ToneError):
    pass


class ConfirmationRequired(ToneError):
    """A destructive action was issued without its confirmation step."""
