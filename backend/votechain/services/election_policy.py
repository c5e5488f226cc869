"""
Election rule checks applied to a vote before it is stored.
"""
import enum
import uuid
from datetime import datetime
from typing import Iterable, List, Optional

from votechain.models.election import Election, VotingPolicy
from votechain.models.vote import Vote
from votechain.store.vote_store import VoteStore


class PolicyViolation(str, enum.Enum):
    """Identifiers of the election rules a vote can break."""
    NOT_STARTED = "not_started"
    ENDED = "ended"
    EMAIL_REQUIRED = "email_required"
    ALREADY_VOTED = "already_voted"
    EMPTY_SELECTION = "empty_selection"
    INVALID_CANDIDATE = "invalid_candidate"
    POLICY_VIOLATION = "policy_violation"


VIOLATION_MESSAGES = {
    PolicyViolation.NOT_STARTED: "Election has not started yet",
    PolicyViolation.ENDED: "Election has ended",
    PolicyViolation.EMAIL_REQUIRED: "Email is required for this election",
    PolicyViolation.ALREADY_VOTED: "You have already voted in this election",
    PolicyViolation.EMPTY_SELECTION: "Please select at least one candidate",
    PolicyViolation.INVALID_CANDIDATE: "Invalid candidate selection",
    PolicyViolation.POLICY_VIOLATION: "This election only allows voting for one candidate",
}


def check_window(now: datetime, start_time: datetime, end_time: datetime) -> List[PolicyViolation]:
    if now < start_time:
        return [PolicyViolation.NOT_STARTED]
    if now > end_time:
        return [PolicyViolation.ENDED]
    return []


def check_registration(requires_registration: bool, voter_email: Optional[str]) -> List[PolicyViolation]:
    if requires_registration and not voter_email:
        return [PolicyViolation.EMAIL_REQUIRED]
    return []


def check_duplicate_voter(existing_vote: Optional[Vote]) -> List[PolicyViolation]:
    """
    Flag a repeat voter. Callers only look up ``existing_vote`` when an
    email was supplied; anonymous votes are never checked.
    """
    if existing_vote is not None:
        return [PolicyViolation.ALREADY_VOTED]
    return []


def normalize_candidate_id(candidate_id: object) -> Optional[str]:
    """Canonical lower-case UUID string, or None when the id is malformed."""
    if isinstance(candidate_id, uuid.UUID):
        return str(candidate_id)
    try:
        return str(uuid.UUID(str(candidate_id)))
    except ValueError:
        return None


def check_candidate_selection(
    selected_ids: Iterable[object],
    valid_ids: Iterable[object],
    policy: VotingPolicy
) -> List[PolicyViolation]:
    """
    A selection is a set: a repeated id counts as an invalid selection,
    as does any id that is malformed or not a candidate of the election.
    """
    selected = [normalize_candidate_id(candidate_id) for candidate_id in selected_ids]
    if not selected:
        return [PolicyViolation.EMPTY_SELECTION]

    violations = []
    valid = {normalize_candidate_id(candidate_id) for candidate_id in valid_ids}
    valid.discard(None)
    unknown = any(candidate_id not in valid for candidate_id in selected)
    if unknown or len(set(selected)) != len(selected):
        violations.append(PolicyViolation.INVALID_CANDIDATE)
    if policy == VotingPolicy.SINGLE and len(selected) > 1:
        violations.append(PolicyViolation.POLICY_VIOLATION)
    return violations


class ElectionPolicyChecker:
    """Runs every election rule against a prospective vote."""

    def __init__(self, store: VoteStore):
        self.store = store

    async def check(
        self,
        election: Election,
        candidate_ids: List[str],
        voter_email: Optional[str],
        now: datetime
    ) -> List[PolicyViolation]:
        """
        Evaluate all rules and return every violation, in rule order.
        The only I/O is the duplicate-voter lookup, done when an email is given.
        """
        violations = check_window(now, election.start_time, election.end_time)
        violations += check_registration(election.requires_registration, voter_email)

        if voter_email:
            existing = await self.store.find_vote_by_email(election.id, voter_email)
            violations += check_duplicate_voter(existing)

        candidates = await self.store.list_candidates(election.id)
        violations += check_candidate_selection(
            candidate_ids,
            [candidate.id for candidate in candidates],
            election.voting_policy
        )
        return violations
