"""
Exception hierarchy shared by the store, ledger and service layers.
"""
from typing import Optional


class VoteChainError(Exception):
    """Base class for all application errors."""


class RecordNotFound(VoteChainError):
    """A requested row does not exist in the store."""

    def __init__(self, entity: str, record_id: object):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id} not found")


class PersistenceError(VoteChainError):
    """A write against the row store failed."""


class ConstraintViolation(PersistenceError):
    """A write was rejected by a uniqueness constraint."""


class LedgerError(VoteChainError):
    """Base class for ledger anchor failures."""


class LedgerUnavailable(LedgerError):
    """
    The ledger could not be reached, is not configured, or timed out.

    ``tx_ref`` is set when a transaction was broadcast but its receipt
    never arrived, so the anchor may still confirm later.
    """

    def __init__(self, message: str, tx_ref: Optional[str] = None):
        self.tx_ref = tx_ref
        super().__init__(message)


class LedgerRejected(LedgerError):
    """The ledger contract refused or reverted the transaction."""

    def __init__(self, message: str, tx_ref: Optional[str] = None):
        self.tx_ref = tx_ref
        super().__init__(message)
