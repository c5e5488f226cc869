"""
Election management service.
"""
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from votechain.core.config import settings
from votechain.core.exceptions import PersistenceError
from votechain.models.election import Election, Candidate
from votechain.models.vote import Vote
from votechain.schemas.election import ElectionCreate


class ElectionService:
    """Service for election management operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_election(
        self,
        election_data: ElectionCreate,
        creator_id: Optional[uuid.UUID] = None
    ) -> Election:
        """
        Create an election, then its candidates.

        If the candidates cannot be stored the freshly created election is
        deleted again so no election is left without candidates.
        """
        start_time = election_data.start_time or datetime.utcnow()
        end_time = election_data.end_time or (
            start_time + timedelta(days=settings.ELECTION_DEFAULT_DURATION_DAYS)
        )

        election = Election(
            title=election_data.title,
            description=election_data.description,
            start_time=start_time,
            end_time=end_time,
            voting_policy=election_data.voting_policy,
            requires_registration=election_data.requires_registration,
            status_override=election_data.status,
            vote_count=0,
            creator_id=creator_id,
        )

        try:
            self.db.add(election)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Election creation failed: {}", e)
            raise PersistenceError(f"Failed to create election: {e}") from e

        election_id = election.id
        try:
            for candidate_data in election_data.candidates:
                self.db.add(Candidate(
                    election_id=election_id,
                    name=candidate_data.name.strip(),
                    description=candidate_data.description or "",
                ))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Candidate creation failed, removing election {}: {}", election_id, e)
            await self.db.execute(delete(Election).where(Election.id == election_id))
            await self.db.commit()
            raise PersistenceError(f"Failed to create candidates: {e}") from e

        logger.info("Created election {} with {} candidates", election_id, len(election_data.candidates))
        return await self.get_election(election_id)

    async def get_election(self, election_id: uuid.UUID) -> Optional[Election]:
        """Get an election by ID with candidates."""
        result = await self.db.execute(
            select(Election)
            .options(selectinload(Election.candidates))
            .where(Election.id == election_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_elections(self) -> List[Election]:
        """Get all elections, newest first."""
        result = await self.db.execute(
            select(Election)
            .options(selectinload(Election.candidates))
            .order_by(Election.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_results(self, election: Election) -> Dict[str, Any]:
        """Tally how many votes each candidate received."""
        result = await self.db.execute(
            select(Vote.candidate_ids).where(Vote.election_id == election.id)
        )
        selections = result.scalars().all()

        counts: Dict[str, int] = {}
        for candidate_ids in selections:
            for candidate_id in candidate_ids or []:
                counts[candidate_id] = counts.get(candidate_id, 0) + 1

        total_votes = len(selections)
        results = []
        for candidate in election.candidates:
            vote_count = counts.get(str(candidate.id), 0)
            results.append({
                "candidate_id": candidate.id,
                "candidate_name": candidate.name,
                "vote_count": vote_count,
                "percentage": (vote_count / total_votes * 100) if total_votes else 0.0,
            })

        return {"total_votes": total_votes, "results": results}
