from typing import Any, Optional


class LedgerError(Exception):
    status_code = 500

    def __init__(self, message: str, *, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(LedgerError, ValueError):
    """Malformed, missing or negative input. Raised before any ledger mutation."""

    status_code = 400


class NotFoundError(LedgerError, LookupError):
    status_code = 404


class ConflictError(LedgerError):
    """Duplicate unique key: bill number or catalog name collision."""

    status_code = 409


class UpstreamUnavailable(LedgerError):
    """The external job-metadata source could not be reached."""

    status_code = 503


class InternalError(LedgerError):
    status_code = 500
