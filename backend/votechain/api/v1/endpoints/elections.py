"""
Election management API endpoints.
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from votechain.core.database import get_db
from votechain.core.exceptions import PersistenceError
from votechain.services.election_service import ElectionService
from votechain.models.user import User
from votechain.schemas.election import (
    ElectionCreate,
    ElectionResponse,
    ElectionListResponse,
    ElectionResultsResponse,
)
from votechain.api.v1.deps import require_authentication


router = APIRouter()


@router.get("", response_model=List[ElectionListResponse])
async def list_elections(
    db: AsyncSession = Depends(get_db)
) -> List[ElectionListResponse]:
    """Get all elections, newest first."""
    election_service = ElectionService(db)
    elections = await election_service.get_elections()
    return [ElectionListResponse.model_validate(e) for e in elections]


@router.post("", response_model=ElectionResponse, status_code=status.HTTP_201_CREATED)
async def create_election(
    election_data: ElectionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_authentication)
) -> ElectionResponse:
    """
    Create a new election with its candidates.

    Start time defaults to now and end time to a week later.
    """
    election_service = ElectionService(db)

    try:
        election = await election_service.create_election(election_data, current_user.id)
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create election"
        )

    return ElectionResponse.model_validate(election)


@router.get("/{election_id}", response_model=ElectionResponse)
async def get_election(
    election_id: UUID,
    db: AsyncSession = Depends(get_db)
) -> ElectionResponse:
    """Get election details with candidates."""
    election_service = ElectionService(db)
    election = await election_service.get_election(election_id)

    if not election:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Election not found"
        )

    return ElectionResponse.model_validate(election)


@router.get("/{election_id}/results", response_model=ElectionResultsResponse)
async def get_election_results(
    election_id: UUID,
    db: AsyncSession = Depends(get_db)
) -> ElectionResultsResponse:
    """Votes per candidate with percentages."""
    election_service = ElectionService(db)
    election = await election_service.get_election(election_id)

    if not election:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Election not found"
        )

    results = await election_service.get_results(election)

    return ElectionResultsResponse(
        election_id=election.id,
        title=election.title,
        status=election.status,
        total_votes=results["total_votes"],
        results=results["results"],
    )
