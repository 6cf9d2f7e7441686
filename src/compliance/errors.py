"""Error kinds raised by the compliance ledger, banking and pooling engines."""

from typing import List, Optional


class ComplianceError(Exception):
    """Base class for all ledger errors."""


class ValidationError(ComplianceError):
    """Rejected input: bad amount, insufficient balance, invalid pool."""

    def __init__(self, message: str, reasons: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.reasons = list(reasons or [])


class NotFoundError(ComplianceError):
    """A compliance record or route required by the operation is missing."""


class ConsistencyError(ComplianceError):
    """
    Stored ledger state contradicts a check that already passed.

    Raised when FIFO consumption runs out of bank entries after the
    availability check succeeded. Points at a storage race or a bug and
    must be investigated, not retried.
    """


class DuplicateRecordError(ComplianceError):
    """A record with the same natural key was stored by someone else first."""
