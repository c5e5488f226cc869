"""
Vote submission API endpoints.
Votes are validated against the election rules, stored, then anchored to the ledger.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from votechain.services.vote_service import VoteService, ErrorKind
from votechain.schemas.vote import VoteSubmitRequest, VoteSubmitResponse
from votechain.api.v1.deps import get_vote_service


router = APIRouter()


def _status_for(kind: ErrorKind) -> int:
    if kind == ErrorKind.ELECTION_NOT_FOUND:
        return status.HTTP_404_NOT_FOUND
    if kind == ErrorKind.ALREADY_VOTED:
        return status.HTTP_409_CONFLICT
    if kind == ErrorKind.PERSISTENCE_ERROR:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


@router.post(
    "/{election_id}",
    response_model=VoteSubmitResponse,
    status_code=status.HTTP_201_CREATED
)
async def submit_vote(
    election_id: UUID,
    request: VoteSubmitRequest,
    vote_service: VoteService = Depends(get_vote_service)
) -> VoteSubmitResponse:
    """
    Submit a vote.

    The vote is accepted once it is stored. Anchoring to the ledger is
    best effort: when it fails the response reports the vote as
    unanchored and a later ledger sync retries it.
    """
    submission, error = await vote_service.submit_vote(
        election_id=election_id,
        candidate_ids=request.candidate_ids,
        voter_email=request.voter_email
    )

    if error:
        raise HTTPException(
            status_code=_status_for(error.kind),
            detail=error.message
        )

    return VoteSubmitResponse(
        vote_id=submission.vote_id,
        election_id=submission.election_id,
        vote_hash=submission.vote_hash,
        anchor=submission.anchor.value,
        anchor_status=submission.anchor_status,
        ledger_tx_ref=submission.tx_ref,
        ledger_block_height=submission.block_height,
        timestamp=submission.created_at,
    )
