"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
"""

from surveyjoin.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a pipeline contract.

    Called at stage boundaries to verify the preceding stage produced the
    guaranteed invariants. Fail-fast: no recovery, no fallback, no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true.
    message : str
        Error message explaining the contract violation.

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require("SEQN" in df.columns, "Join contract: missing key column")
    """
    if not condition:
        raise ContractViolation(message)
