"""
Tests for election rule checks.
"""
import uuid
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from votechain.models.election import (
    Election,
    ElectionStatus,
    VotingPolicy,
    derive_election_status,
)
from votechain.services.election_policy import (
    ElectionPolicyChecker,
    PolicyViolation,
    check_candidate_selection,
    check_duplicate_voter,
    check_registration,
    check_window,
    normalize_candidate_id,
)


NOW = datetime(2026, 5, 10, 12, 0, 0)


class TestWindow:

    def test_open_window(self):
        assert check_window(NOW, NOW - timedelta(hours=1), NOW + timedelta(hours=1)) == []

    def test_before_start(self):
        assert check_window(NOW, NOW + timedelta(seconds=1), NOW + timedelta(days=1)) == [
            PolicyViolation.NOT_STARTED
        ]

    def test_after_end(self):
        assert check_window(NOW, NOW - timedelta(days=2), NOW - timedelta(seconds=1)) == [
            PolicyViolation.ENDED
        ]

    def test_boundaries_are_inclusive(self):
        assert check_window(NOW, NOW, NOW + timedelta(days=1)) == []
        assert check_window(NOW, NOW - timedelta(days=1), NOW) == []


class TestStatusDerivation:

    def test_status_follows_window(self):
        start, end = NOW, NOW + timedelta(days=1)

        assert derive_election_status(NOW - timedelta(minutes=1), start, end) == ElectionStatus.DRAFT
        assert derive_election_status(NOW + timedelta(hours=1), start, end) == ElectionStatus.ACTIVE
        assert derive_election_status(end + timedelta(minutes=1), start, end) == ElectionStatus.ENDED

    def test_override_wins(self):
        election = Election(
            title="Forced",
            start_time=NOW - timedelta(days=1),
            end_time=NOW + timedelta(days=1),
            status_override=ElectionStatus.ENDED,
        )
        assert election.status_at(NOW) == ElectionStatus.ENDED


class TestRegistration:

    def test_email_required(self):
        assert check_registration(True, None) == [PolicyViolation.EMAIL_REQUIRED]
        assert check_registration(True, "") == [PolicyViolation.EMAIL_REQUIRED]

    def test_email_optional(self):
        assert check_registration(False, None) == []
        assert check_registration(True, "v@example.com") == []

    def test_duplicate_voter(self):
        assert check_duplicate_voter(object()) == [PolicyViolation.ALREADY_VOTED]
        assert check_duplicate_voter(None) == []


A, B, C = (str(uuid.uuid4()) for _ in range(3))
UNKNOWN = str(uuid.uuid4())


class TestCandidateSelection:

    valid = [A, B, C]

    def test_single_choice(self):
        assert check_candidate_selection([A], self.valid, VotingPolicy.SINGLE) == []

    def test_single_policy_rejects_two(self):
        assert check_candidate_selection([A, B], self.valid, VotingPolicy.SINGLE) == [
            PolicyViolation.POLICY_VIOLATION
        ]

    def test_multiple_policy_accepts_two(self):
        assert check_candidate_selection([A, B], self.valid, VotingPolicy.MULTIPLE) == []

    def test_unknown_candidate(self):
        assert check_candidate_selection([UNKNOWN], self.valid, VotingPolicy.MULTIPLE) == [
            PolicyViolation.INVALID_CANDIDATE
        ]

    def test_empty_selection(self):
        assert check_candidate_selection([], self.valid, VotingPolicy.MULTIPLE) == [
            PolicyViolation.EMPTY_SELECTION
        ]

    def test_all_violations_reported(self):
        violations = check_candidate_selection([A, UNKNOWN], self.valid, VotingPolicy.SINGLE)
        assert violations == [PolicyViolation.INVALID_CANDIDATE, PolicyViolation.POLICY_VIOLATION]

    def test_repeated_candidate(self):
        assert check_candidate_selection([A, A, A], self.valid, VotingPolicy.MULTIPLE) == [
            PolicyViolation.INVALID_CANDIDATE
        ]

    def test_repeated_candidate_in_another_spelling(self):
        violations = check_candidate_selection([A, A.upper()], self.valid, VotingPolicy.MULTIPLE)
        assert violations == [PolicyViolation.INVALID_CANDIDATE]

    def test_ids_are_compared_in_canonical_form(self):
        assert check_candidate_selection([A.upper()], self.valid, VotingPolicy.SINGLE) == []
        assert check_candidate_selection(["{%s}" % B], self.valid, VotingPolicy.SINGLE) == []
        assert check_candidate_selection([C.replace("-", "")], self.valid, VotingPolicy.SINGLE) == []

    def test_uuid_objects_match_their_strings(self):
        assert check_candidate_selection([uuid.UUID(A)], self.valid, VotingPolicy.SINGLE) == []
        assert check_candidate_selection([A], [uuid.UUID(v) for v in self.valid], VotingPolicy.SINGLE) == []

    def test_malformed_id(self):
        assert check_candidate_selection(["not-a-uuid"], self.valid, VotingPolicy.SINGLE) == [
            PolicyViolation.INVALID_CANDIDATE
        ]
        assert check_candidate_selection([42], self.valid, VotingPolicy.SINGLE) == [
            PolicyViolation.INVALID_CANDIDATE
        ]


class TestNormalizeCandidateId:

    def test_canonical_form(self):
        assert normalize_candidate_id(A.upper()) == A
        assert normalize_candidate_id(uuid.UUID(A)) == A

    def test_malformed(self):
        assert normalize_candidate_id("a") is None
        assert normalize_candidate_id("") is None


class TestPolicyChecker:
    """ElectionPolicyChecker against a mocked store."""

    def _election(self, **kwargs) -> Election:
        fields = dict(
            id=uuid.uuid4(),
            title="Mocked",
            start_time=NOW - timedelta(hours=1),
            end_time=NOW + timedelta(hours=1),
            voting_policy=VotingPolicy.SINGLE,
            requires_registration=False,
        )
        fields.update(kwargs)
        return Election(**fields)

    def _store(self, candidate_ids, existing_vote=None):
        store = AsyncMock()
        store.list_candidates.return_value = [
            type("CandidateRow", (), {"id": candidate_id})() for candidate_id in candidate_ids
        ]
        store.find_vote_by_email.return_value = existing_vote
        return store

    @pytest.mark.asyncio
    async def test_clean_vote(self):
        store = self._store([A, B])
        checker = ElectionPolicyChecker(store)

        assert await checker.check(self._election(), [A], None, NOW) == []

    @pytest.mark.asyncio
    async def test_anonymous_vote_skips_duplicate_lookup(self):
        store = self._store([A])
        checker = ElectionPolicyChecker(store)

        await checker.check(self._election(), [A], None, NOW)

        store.find_vote_by_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_repeat_voter(self):
        store = self._store([A], existing_vote=object())
        checker = ElectionPolicyChecker(store)

        violations = await checker.check(self._election(), [A], "v@example.com", NOW)

        assert violations == [PolicyViolation.ALREADY_VOTED]
        store.find_vote_by_email.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_violations_in_rule_order(self):
        store = self._store([A, B])
        checker = ElectionPolicyChecker(store)
        election = self._election(
            end_time=NOW - timedelta(minutes=1),
            requires_registration=True,
        )

        violations = await checker.check(election, [A, B], None, NOW)

        assert violations == [
            PolicyViolation.ENDED,
            PolicyViolation.EMAIL_REQUIRED,
            PolicyViolation.POLICY_VIOLATION,
        ]
