"""Pipeline contracts and failure taxonomy.

Contracts enforce semantic guarantees between pipeline stages and fail
immediately when a stage does not produce its promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Source errors are recovered per entry
"""

from surveyjoin.contracts.failure import (
    ContractViolation,
    FetchError,
    ParseError,
    PersistenceError,
    SourceError,
)
from surveyjoin.contracts.base import require
from surveyjoin.contracts.tagging import assert_tagged
from surveyjoin.contracts.join import assert_joined

__all__ = [
    "ContractViolation",
    "FetchError",
    "ParseError",
    "PersistenceError",
    "SourceError",
    "require",
    "assert_tagged",
    "assert_joined",
]
