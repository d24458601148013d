"""Centralized failure taxonomy.

Per-entry failures (FetchError, ParseError) are recovered locally: the
accumulator logs them, records an outcome and skips the entry. Storage
failures (PersistenceError) and pipeline bugs (ContractViolation) are fatal
and propagate out of the orchestrator.

Key distinction:
- ValidationError: User/config error (handled by Pydantic)
- FetchError / ParseError: Recoverable source problems (entry skipped)
- PersistenceError: Expected output could not be written (run aborts)
- ContractViolation: Pipeline bug (programmer error)
"""

from typing import Optional


class SourceError(Exception):
    """Base class for recoverable per-entry failures."""

    status = "failed"


class FetchError(SourceError):
    """Raised when a remote file cannot be retrieved.

    Covers non-200 responses and network errors alike. ``status_code`` is
    None when no HTTP response was received.
    """

    status = "fetch_failed"

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(SourceError):
    """Raised when a downloaded file cannot be parsed into a table."""

    status = "parse_failed"

    def __init__(self, message: str, path):
        super().__init__(message)
        self.path = path


class PersistenceError(RuntimeError):
    """Raised when an output artifact cannot be written or read back."""


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic, not bad user input or a
    recoverable source problem. A stage did not produce the invariants
    it promised.
    """
    pass
