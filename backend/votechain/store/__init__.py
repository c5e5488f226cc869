"""
Persistence adapters.
"""
from votechain.store.vote_store import VoteStore

__all__ = ["VoteStore"]
