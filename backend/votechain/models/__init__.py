"""
SQLAlchemy database models.
"""
from votechain.models.election import Election, Candidate, ElectionStatus, VotingPolicy
from votechain.models.vote import Vote, AnchorStatus, LedgerSyncRecord
from votechain.models.user import User

__all__ = [
    "Election",
    "Candidate",
    "ElectionStatus",
    "VotingPolicy",
    "Vote",
    "AnchorStatus",
    "LedgerSyncRecord",
    "User",
]
