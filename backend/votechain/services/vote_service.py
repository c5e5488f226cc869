"""
Vote service handling validated vote submission and ledger anchoring.
"""
import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from loguru import logger

from votechain.core.config import settings
from votechain.core.exceptions import (
    RecordNotFound,
    PersistenceError,
    ConstraintViolation,
    LedgerUnavailable,
    LedgerRejected,
)
from votechain.core.security import compute_vote_hash, compute_voter_hash
from votechain.ledger.ledger_client import LedgerClient
from votechain.models.vote import AnchorStatus
from votechain.services.election_policy import (
    ElectionPolicyChecker,
    PolicyViolation,
    VIOLATION_MESSAGES,
    normalize_candidate_id,
)
from votechain.store.vote_store import VoteStore


class ErrorKind(str, enum.Enum):
    """Why a vote submission was refused."""
    ELECTION_NOT_FOUND = "election_not_found"
    NOT_STARTED = "not_started"
    ENDED = "ended"
    EMAIL_REQUIRED = "email_required"
    ALREADY_VOTED = "already_voted"
    EMPTY_SELECTION = "empty_selection"
    INVALID_CANDIDATE = "invalid_candidate"
    POLICY_VIOLATION = "policy_violation"
    PERSISTENCE_ERROR = "persistence_error"

    @property
    def is_validation(self) -> bool:
        return self not in (ErrorKind.ELECTION_NOT_FOUND, ErrorKind.PERSISTENCE_ERROR)


class AnchorOutcome(str, enum.Enum):
    ANCHORED = "anchored"
    UNANCHORED = "unanchored"


@dataclass
class VoteError:
    """A refused submission. ``violations`` lists every rule that failed."""
    kind: ErrorKind
    message: str
    violations: List[PolicyViolation] = field(default_factory=list)


@dataclass
class VoteSubmission:
    """An accepted vote and how far its anchoring got."""
    vote_id: uuid.UUID
    election_id: uuid.UUID
    vote_hash: str
    voter_hash: Optional[str]
    anchor: AnchorOutcome
    anchor_status: AnchorStatus
    created_at: datetime
    tx_ref: Optional[str] = None
    block_height: Optional[int] = None


class VoteService:
    """Service for vote operations."""

    def __init__(
        self,
        store: VoteStore,
        ledger: LedgerClient,
        salt: Optional[str] = None
    ):
        self.store = store
        self.ledger = ledger
        self.salt = settings.VOTE_ANONYMIZATION_SALT if salt is None else salt
        self.policy_checker = ElectionPolicyChecker(store)

    async def submit_vote(
        self,
        election_id: uuid.UUID,
        candidate_ids: List[str],
        voter_email: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Tuple[Optional[VoteSubmission], Optional[VoteError]]:
        """
        Validate, store and anchor a vote.

        Every election rule is checked before anything is written. The vote
        is stored before anchoring is attempted, so a ledger failure only
        downgrades the result to unanchored and never rejects the vote.

        Returns:
            Tuple of (submission, error)
        """
        now = now or datetime.utcnow()
        candidate_ids = [str(candidate_id) for candidate_id in candidate_ids]

        try:
            election = await self.store.get_election(election_id)
        except RecordNotFound:
            return None, VoteError(ErrorKind.ELECTION_NOT_FOUND, "Election not found")

        violations = await self.policy_checker.check(election, candidate_ids, voter_email, now)
        if violations:
            first = violations[0]
            logger.info("Vote rejected for election {}: {}", election_id, [v.value for v in violations])
            return None, VoteError(ErrorKind(first.value), VIOLATION_MESSAGES[first], violations)

        candidate_ids = [normalize_candidate_id(candidate_id) for candidate_id in candidate_ids]

        vote_hash = compute_vote_hash(election_id, candidate_ids, voter_email, now, self.salt)
        voter_hash = compute_voter_hash(voter_email, election_id, self.salt) if voter_email else None

        try:
            vote = await self.store.insert_vote(
                election_id=election_id,
                candidate_ids=candidate_ids,
                voter_email=voter_email,
                vote_hash=vote_hash,
                voter_hash=voter_hash,
                created_at=now,
            )
        except ConstraintViolation:
            # Lost the race against a concurrent vote with the same email
            return None, VoteError(
                ErrorKind.ALREADY_VOTED,
                VIOLATION_MESSAGES[PolicyViolation.ALREADY_VOTED],
                [PolicyViolation.ALREADY_VOTED],
            )
        except PersistenceError:
            return None, VoteError(ErrorKind.PERSISTENCE_ERROR, "Failed to submit vote. Please try again.")

        submission = VoteSubmission(
            vote_id=vote.id,
            election_id=election_id,
            vote_hash=vote_hash,
            voter_hash=voter_hash,
            anchor=AnchorOutcome.UNANCHORED,
            anchor_status=AnchorStatus.UNANCHORED,
            created_at=now,
        )

        if self.ledger.is_available():
            await self._anchor(submission)

        return submission, None

    async def _anchor(self, submission: VoteSubmission) -> None:
        """Anchor a stored vote. Failures are logged and recorded, never raised."""
        status = AnchorStatus.FAILED
        tx_ref = block_height = None

        try:
            receipt = await self.ledger.submit_hash(
                str(submission.election_id),
                submission.vote_hash,
                submission.voter_hash
            )
            status = AnchorStatus.CONFIRMED
            tx_ref = receipt.tx_ref
            block_height = receipt.block_height
        except LedgerUnavailable as e:
            logger.warning("Ledger unavailable while anchoring vote {}: {}", submission.vote_id, e)
            if e.tx_ref:
                status = AnchorStatus.PENDING
                tx_ref = e.tx_ref
        except LedgerRejected as e:
            logger.warning("Ledger rejected vote {}: {}", submission.vote_id, e)

        try:
            await self.store.update_vote_anchor(submission.vote_id, status, tx_ref, block_height)
        except PersistenceError:
            logger.error(
                "Vote {} anchored as {} (tx {}) but the result could not be stored",
                submission.vote_id, status.value, tx_ref
            )
            return

        submission.anchor_status = status
        submission.tx_ref = tx_ref
        submission.block_height = block_height
        if status == AnchorStatus.CONFIRMED:
            submission.anchor = AnchorOutcome.ANCHORED
