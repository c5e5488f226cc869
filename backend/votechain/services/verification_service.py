"""
Verification service for vote integrity checks, election audits and ledger sync.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from loguru import logger

from votechain.core.config import settings
from votechain.core.exceptions import (
    VoteChainError,
    RecordNotFound,
    PersistenceError,
    LedgerUnavailable,
    LedgerRejected,
)
from votechain.core.security import compute_vote_hash
from votechain.ledger.ledger_client import LedgerClient
from votechain.models.vote import Vote, AnchorStatus, LedgerSyncRecord
from votechain.services.integrity_report import (
    AuditReport,
    ElectionValidationStatus,
    IntegrityCheckResult,
    HASH_MISMATCH,
    LEDGER_VALIDATION_FAILED,
    LEDGER_STATUS_UNKNOWN,
    build_recommendations,
    build_validation_status,
)
from votechain.store.vote_store import VoteStore


class VerificationService:
    """Service for verification operations."""

    def __init__(
        self,
        store: VoteStore,
        ledger: LedgerClient,
        salt: Optional[str] = None,
        score_threshold: Optional[int] = None
    ):
        self.store = store
        self.ledger = ledger
        self.salt = settings.VOTE_ANONYMIZATION_SALT if salt is None else salt
        self.score_threshold = (
            settings.INTEGRITY_SCORE_THRESHOLD if score_threshold is None else score_threshold
        )

    async def verify_vote_integrity(self, vote_id: uuid.UUID) -> IntegrityCheckResult:
        """
        Recompute a vote's hash from its stored fields and compare.

        When the vote carries a ledger reference and the ledger is reachable,
        the contract is asked whether it still recognises the hash. The vote
        itself is never modified here.

        Raises:
            RecordNotFound: if the vote does not exist
        """
        vote = await self.store.get_vote(vote_id)

        # A stored selection that is not a list cannot have produced the hash.
        current_hash = ""
        if isinstance(vote.candidate_ids, list):
            current_hash = compute_vote_hash(
                vote.election_id,
                vote.candidate_ids,
                vote.voter_email,
                vote.created_at,
                self.salt
            )

        anomalies = []
        is_intact = vote.vote_hash == current_hash
        if not is_intact:
            anomalies.append(HASH_MISMATCH)

        ledger_confirmed = False
        if vote.ledger_tx_ref and self.ledger.is_available():
            try:
                record = await self.ledger.query_hash(str(vote.election_id), vote.vote_hash)
                ledger_confirmed = record.confirmed
                if not record.confirmed:
                    anomalies.append(LEDGER_VALIDATION_FAILED)
            except LedgerUnavailable as e:
                logger.warning("Could not verify vote {} on the ledger: {}", vote_id, e)
                anomalies.append(LEDGER_STATUS_UNKNOWN)

        if anomalies:
            logger.warning("Vote {} failed integrity check: {}", vote_id, anomalies)

        return IntegrityCheckResult(
            vote_id=vote.id,
            original_hash=vote.vote_hash,
            current_hash=current_hash,
            is_intact=is_intact,
            ledger_confirmed=ledger_confirmed,
            anomalies=anomalies,
        )

    async def batch_verify(self, vote_ids: List[uuid.UUID]) -> List[IntegrityCheckResult]:
        """Verify each vote independently; one failure never stops the rest."""
        results = []
        for vote_id in vote_ids:
            try:
                results.append(await self.verify_vote_integrity(vote_id))
            except RecordNotFound:
                results.append(IntegrityCheckResult.failed(vote_id, "vote not found"))
            except VoteChainError as e:
                logger.error("Failed to verify vote {}: {}", vote_id, e)
                results.append(IntegrityCheckResult.failed(vote_id, str(e)))
            except Exception as e:
                logger.exception("Unexpected error verifying vote {}", vote_id)
                results.append(IntegrityCheckResult.failed(vote_id, str(e)))
        return results

    async def get_election_validation_status(
        self,
        election_id: uuid.UUID
    ) -> ElectionValidationStatus:
        """
        Classify an election's votes and score them.

        The ledger sync flag is best effort: it is true only when the
        contract's vote count for the election equals the number of
        confirmed votes, and false whenever the ledger cannot be asked.

        Raises:
            RecordNotFound: if the election does not exist
        """
        await self.store.get_election(election_id)
        votes = await self.store.list_votes(election_id)
        return await self._status_for(election_id, votes)

    async def _status_for(
        self,
        election_id: uuid.UUID,
        votes: List[Vote]
    ) -> ElectionValidationStatus:
        status = build_validation_status(election_id, votes, ledger_synced=False)

        if self.ledger.is_available():
            try:
                ledger_count = await self.ledger.get_vote_count(str(election_id))
                status.ledger_synced = ledger_count == status.validated_votes
            except LedgerUnavailable as e:
                logger.warning("Could not check ledger sync for election {}: {}", election_id, e)

        return status

    async def generate_audit_report(self, election_id: uuid.UUID) -> AuditReport:
        """Validation status, a check of every vote, and recommendations."""
        summary = await self.get_election_validation_status(election_id)
        votes = await self.store.list_votes(election_id)
        checks = await self.batch_verify([vote.id for vote in votes])

        return AuditReport(
            election_id=election_id,
            generated_at=datetime.utcnow(),
            summary=summary,
            vote_checks=checks,
            recommendations=build_recommendations(summary, checks, self.score_threshold),
        )

    async def revalidate_vote(self, vote_id: uuid.UUID) -> IntegrityCheckResult:
        """Verify a vote and store the outcome on the vote row."""
        check = await self.verify_vote_integrity(vote_id)
        await self.store.update_vote_integrity(
            vote_id,
            verified=check.is_intact,
            anomalies=check.anomalies,
            checked_at=check.checked_at,
        )
        return check

    async def sync_ledger(self, election_id: uuid.UUID) -> LedgerSyncRecord:
        """
        Retry anchoring for unconfirmed votes, then snapshot the status.

        Pending votes are confirmed by looking their hash up and submitted
        again when the ledger does not know it; failed and unanchored votes
        are submitted again. A vote whose new anchor state cannot be stored
        is logged and skipped. Nothing is retried when the ledger is not
        configured.
        """
        await self.store.get_election(election_id)
        votes = await self.store.list_votes(election_id)

        if self.ledger.is_available():
            # A failed write rolls the session back, so each vote is reloaded by id.
            retry_ids = [vote.id for vote in votes if vote.anchor_status != AnchorStatus.CONFIRMED]
            for vote_id in retry_ids:
                try:
                    await self._retry_anchor(await self.store.get_vote(vote_id))
                except (RecordNotFound, PersistenceError) as e:
                    logger.error("Could not re-anchor vote {}: {}", vote_id, e)
            votes = await self.store.list_votes(election_id)

        status = await self._status_for(election_id, votes)
        network = await self.ledger.network_status()

        values = status.to_dict()
        values.pop("election_id")
        values["network_status"] = network.to_dict()
        return await self.store.upsert_sync_record(election_id, values)

    async def _retry_anchor(self, vote: Vote) -> None:
        election_id = str(vote.election_id)
        try:
            if vote.anchor_status == AnchorStatus.PENDING and vote.ledger_tx_ref:
                record = await self.ledger.query_hash(election_id, vote.vote_hash)
                if record.confirmed:
                    await self.store.update_vote_anchor(
                        vote.id, AnchorStatus.CONFIRMED, block_height=record.block_height
                    )
                    return
                logger.info("Pending vote {} is not on the ledger, submitting again", vote.id)

            receipt = await self.ledger.submit_hash(election_id, vote.vote_hash, vote.voter_hash)
            await self.store.update_vote_anchor(
                vote.id, AnchorStatus.CONFIRMED, receipt.tx_ref, receipt.block_height
            )
        except LedgerUnavailable as e:
            logger.warning("Ledger unavailable while re-anchoring vote {}: {}", vote.id, e)
            if e.tx_ref:
                await self.store.update_vote_anchor(vote.id, AnchorStatus.PENDING, e.tx_ref)
        except LedgerRejected as e:
            logger.warning("Ledger rejected re-anchored vote {}: {}", vote.id, e)
            await self.store.update_vote_anchor(vote.id, AnchorStatus.FAILED)
