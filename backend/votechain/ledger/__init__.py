"""
Ledger anchoring.
"""
from votechain.ledger.ledger_client import (
    LedgerClient,
    AnchorReceipt,
    LedgerRecord,
    NetworkStatus,
)

__all__ = [
    "LedgerClient",
    "AnchorReceipt",
    "LedgerRecord",
    "NetworkStatus",
]
