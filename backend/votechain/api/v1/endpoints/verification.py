"""
Verification API endpoints for vote integrity, election audits and ledger sync.

Everything except the network status is restricted to the election's creator.
"""
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from votechain.core.exceptions import RecordNotFound, PersistenceError
from votechain.ledger.ledger_client import LedgerClient
from votechain.models.election import Election
from votechain.models.user import User
from votechain.services.integrity_report import summarize_checks
from votechain.services.verification_service import VerificationService
from votechain.store.vote_store import VoteStore
from votechain.schemas.verification import (
    IntegrityCheckResponse,
    ValidationStatusResponse,
    NetworkStatusResponse,
    AuditReportResponse,
    BatchVerifyRequest,
    BatchVerifyResponse,
    RevalidationResponse,
    LedgerSyncResponse,
)
from votechain.api.v1.deps import (
    require_authentication,
    ensure_owner,
    get_ledger_client,
    get_vote_store,
    get_verification_service,
)


router = APIRouter()


async def _owned_election(store: VoteStore, election_id: UUID, user: User) -> Election:
    try:
        election = await store.get_election(election_id)
    except RecordNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Election not found"
        )
    ensure_owner(election, user)
    return election


async def _owned_vote_election(store: VoteStore, vote_id: UUID, user: User) -> Election:
    try:
        vote = await store.get_vote(vote_id)
    except RecordNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vote not found"
        )
    return await _owned_election(store, vote.election_id, user)


@router.get("/network-status", response_model=NetworkStatusResponse)
async def get_network_status(
    ledger: LedgerClient = Depends(get_ledger_client),
    current_user: User = Depends(require_authentication)
) -> NetworkStatusResponse:
    """Ledger connectivity. Reports disconnected rather than failing."""
    network = await ledger.network_status()
    return NetworkStatusResponse(
        available=ledger.is_available(),
        timestamp=datetime.utcnow(),
        **network.to_dict()
    )


@router.get("/elections/{election_id}/status", response_model=ValidationStatusResponse)
async def get_election_status(
    election_id: UUID,
    store: VoteStore = Depends(get_vote_store),
    verification_service: VerificationService = Depends(get_verification_service),
    current_user: User = Depends(require_authentication)
) -> ValidationStatusResponse:
    """Classified vote counts and integrity score of an election."""
    await _owned_election(store, election_id, current_user)
    validation = await verification_service.get_election_validation_status(election_id)
    return ValidationStatusResponse.model_validate(validation)


@router.get("/elections/{election_id}/audit", response_model=AuditReportResponse)
async def get_audit_report(
    election_id: UUID,
    store: VoteStore = Depends(get_vote_store),
    verification_service: VerificationService = Depends(get_verification_service),
    current_user: User = Depends(require_authentication)
) -> AuditReportResponse:
    """
    Full audit of an election.

    Every vote is re-verified and the report lists recommendations for
    the organiser. An unreachable ledger lowers the report's confidence
    but never fails the request.
    """
    await _owned_election(store, election_id, current_user)
    report = await verification_service.generate_audit_report(election_id)
    return AuditReportResponse.model_validate(report)


@router.get("/votes/{vote_id}", response_model=IntegrityCheckResponse)
async def verify_vote(
    vote_id: UUID,
    store: VoteStore = Depends(get_vote_store),
    verification_service: VerificationService = Depends(get_verification_service),
    current_user: User = Depends(require_authentication)
) -> IntegrityCheckResponse:
    """Recompute a vote's hash and check it against the ledger."""
    await _owned_vote_election(store, vote_id, current_user)
    check = await verification_service.verify_vote_integrity(vote_id)
    return IntegrityCheckResponse.model_validate(check)


@router.post("/batch-verify", response_model=BatchVerifyResponse)
async def batch_verify(
    request: BatchVerifyRequest,
    store: VoteStore = Depends(get_vote_store),
    verification_service: VerificationService = Depends(get_verification_service),
    current_user: User = Depends(require_authentication)
) -> BatchVerifyResponse:
    """
    Verify several votes at once.

    Every vote that exists must belong to an election owned by the caller.
    Unknown votes are reported as failed checks, not as errors.
    """
    votes = await store.list_votes_by_ids(request.vote_ids)
    for election_id in {vote.election_id for vote in votes}:
        await _owned_election(store, election_id, current_user)

    checks = await verification_service.batch_verify(request.vote_ids)

    return BatchVerifyResponse(
        total_votes=len(checks),
        results=[IntegrityCheckResponse.model_validate(check) for check in checks],
        summary=summarize_checks(checks),
        timestamp=datetime.utcnow(),
    )


@router.post("/votes/{vote_id}/revalidate", response_model=RevalidationResponse)
async def revalidate_vote(
    vote_id: UUID,
    store: VoteStore = Depends(get_vote_store),
    verification_service: VerificationService = Depends(get_verification_service),
    current_user: User = Depends(require_authentication)
) -> RevalidationResponse:
    """Verify a vote and record the outcome on it."""
    await _owned_vote_election(store, vote_id, current_user)

    try:
        check = await verification_service.revalidate_vote(vote_id)
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to revalidate vote"
        )

    return RevalidationResponse(
        vote_id=vote_id,
        integrity_check=IntegrityCheckResponse.model_validate(check),
    )


@router.post("/elections/{election_id}/sync", response_model=LedgerSyncResponse)
async def sync_ledger(
    election_id: UUID,
    store: VoteStore = Depends(get_vote_store),
    verification_service: VerificationService = Depends(get_verification_service),
    current_user: User = Depends(require_authentication)
) -> LedgerSyncResponse:
    """Retry anchoring of unconfirmed votes and store a fresh status snapshot."""
    await _owned_election(store, election_id, current_user)

    try:
        record = await verification_service.sync_ledger(election_id)
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to sync election with the ledger"
        )

    return LedgerSyncResponse.model_validate(record)
