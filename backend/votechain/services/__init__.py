"""
Business logic services.
"""
from votechain.services.auth_service import AuthService
from votechain.services.election_service import ElectionService
from votechain.services.election_policy import ElectionPolicyChecker
from votechain.services.vote_service import VoteService
from votechain.services.verification_service import VerificationService

__all__ = [
    "AuthService",
    "ElectionService",
    "ElectionPolicyChecker",
    "VoteService",
    "VerificationService",
]
