"""Error taxonomy shared by the normalizer, the services and the HTTP layer."""

from __future__ import annotations


class MilesTrackerError(Exception):
    """Base class for every failure the core reports to its callers."""

    kind: str = "MilesTrackerError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        """Stable ``{code, message}`` shape used by transport layers."""
        return {"code": self.kind, "message": self.message}


class ValidationError(MilesTrackerError):
    """Caller-supplied filter or record breaks a business rule."""

    kind = "ValidationError"


class NotFoundError(MilesTrackerError):
    """A lookup that requires existence found nothing."""

    kind = "NotFoundError"


class DatabaseError(MilesTrackerError):
    """The store failed. The message is opaque; the cause is chained."""

    kind = "DatabaseError"


class ParseError(MilesTrackerError):
    """The request body could not be decoded as structured data."""

    kind = "ParseError"
