"""
Row store adapter for elections, candidates and votes.
"""
import uuid
from datetime import datetime
from typing import List, Optional, Dict, Any

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from votechain.core.exceptions import RecordNotFound, PersistenceError, ConstraintViolation
from votechain.models.election import Election, Candidate
from votechain.models.vote import Vote, AnchorStatus, LedgerSyncRecord


class VoteStore:
    """
    Thin data-access layer the integrity services depend on.

    Reads raise ``RecordNotFound`` for missing rows; writes commit
    immediately and raise ``PersistenceError`` (or ``ConstraintViolation``)
    after rolling back, so a failed write never leaves a partial row.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_election(self, election_id: uuid.UUID) -> Election:
        election = await self.db.get(Election, election_id)
        if election is None:
            raise RecordNotFound("Election", election_id)
        return election

    async def list_candidates(self, election_id: uuid.UUID) -> List[Candidate]:
        result = await self.db.execute(
            select(Candidate)
            .where(Candidate.election_id == election_id)
            .order_by(Candidate.created_at.asc())
        )
        return list(result.scalars().all())

    async def find_vote_by_email(
        self,
        election_id: uuid.UUID,
        voter_email: str
    ) -> Optional[Vote]:
        """Return the vote already cast by this email in this election, if any."""
        result = await self.db.execute(
            select(Vote).where(
                Vote.election_id == election_id,
                Vote.voter_email == voter_email
            ).limit(1)
        )
        return result.scalars().first()

    async def insert_vote(
        self,
        election_id: uuid.UUID,
        candidate_ids: List[str],
        voter_email: Optional[str],
        vote_hash: str,
        voter_hash: Optional[str],
        created_at: datetime
    ) -> Vote:
        """Insert a vote and bump the election's running vote count atomically."""
        vote = Vote(
            election_id=election_id,
            candidate_ids=list(candidate_ids),
            voter_email=voter_email,
            vote_hash=vote_hash,
            voter_hash=voter_hash,
            anchor_status=AnchorStatus.UNANCHORED,
            ledger_confirmed=False,
            created_at=created_at,
        )
        self.db.add(vote)

        try:
            await self.db.execute(
                update(Election)
                .where(Election.id == election_id)
                .values(vote_count=Election.vote_count + 1)
            )
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConstraintViolation(f"Vote rejected by constraint: {e.orig}") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Vote insert failed for election {}: {}", election_id, e)
            raise PersistenceError(f"Failed to store vote: {e}") from e

        return vote

    async def get_vote(self, vote_id: uuid.UUID) -> Vote:
        vote = await self.db.get(Vote, vote_id)
        if vote is None:
            raise RecordNotFound("Vote", vote_id)
        return vote

    async def list_votes(self, election_id: uuid.UUID) -> List[Vote]:
        result = await self.db.execute(
            select(Vote)
            .where(Vote.election_id == election_id)
            .order_by(Vote.created_at.asc())
        )
        return list(result.scalars().all())

    async def list_votes_by_ids(self, vote_ids: List[uuid.UUID]) -> List[Vote]:
        if not vote_ids:
            return []
        result = await self.db.execute(select(Vote).where(Vote.id.in_(vote_ids)))
        return list(result.scalars().all())

    async def update_vote_anchor(
        self,
        vote_id: uuid.UUID,
        anchor_status: AnchorStatus,
        tx_ref: Optional[str] = None,
        block_height: Optional[int] = None
    ) -> Vote:
        """Attach ledger anchor metadata to a stored vote."""
        vote = await self.get_vote(vote_id)
        vote.anchor_status = anchor_status
        vote.ledger_confirmed = anchor_status == AnchorStatus.CONFIRMED
        if tx_ref is not None:
            vote.ledger_tx_ref = tx_ref
        if block_height is not None:
            vote.ledger_block_height = block_height
        await self._commit("anchor metadata", vote_id)
        return vote

    async def update_vote_integrity(
        self,
        vote_id: uuid.UUID,
        verified: bool,
        anomalies: Optional[List[str]] = None,
        checked_at: Optional[datetime] = None
    ) -> Vote:
        """Record the outcome of an integrity check on a vote."""
        vote = await self.get_vote(vote_id)
        vote.integrity_verified = verified
        vote.last_integrity_check = checked_at or datetime.utcnow()
        vote.validation_errors = list(anomalies) if anomalies else None
        await self._commit("integrity result", vote_id)
        return vote

    async def upsert_sync_record(
        self,
        election_id: uuid.UUID,
        values: Dict[str, Any]
    ) -> LedgerSyncRecord:
        """Create or replace the ledger sync snapshot of an election."""
        record = await self.db.get(LedgerSyncRecord, election_id)
        if record is None:
            record = LedgerSyncRecord(election_id=election_id)
            self.db.add(record)

        for field, value in values.items():
            setattr(record, field, value)

        await self._commit("sync record", election_id)
        return record

    async def _commit(self, what: str, record_id: uuid.UUID) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to write {} for {}: {}", what, record_id, e)
            raise PersistenceError(f"Failed to write {what}: {e}") from e
