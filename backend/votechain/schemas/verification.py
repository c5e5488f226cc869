"""
Verification-related Pydantic schemas.
"""
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class IntegrityCheckResponse(BaseModel):
    """Outcome of re-verifying one vote."""

    model_config = ConfigDict(from_attributes=True)

    vote_id: UUID
    original_hash: str
    current_hash: str
    is_intact: bool
    ledger_confirmed: bool
    anomalies: List[str]
    checked_at: datetime


class ValidationStatusResponse(BaseModel):
    """Integrity statistics for an election."""

    model_config = ConfigDict(from_attributes=True)

    election_id: UUID
    total_votes: int
    validated_votes: int
    pending_validation: int
    invalid_votes: int
    ledger_synced: bool
    integrity_score: int = Field(..., ge=0, le=100)
    last_sync_time: datetime


class NetworkStatusResponse(BaseModel):
    """Ledger connectivity, for dashboards."""

    available: bool = Field(..., description="Whether the ledger client is configured")
    connected: bool
    block_height: int
    gas_price: str = Field(..., description="Gas price in gwei")
    network_id: int
    contract_address: str
    timestamp: datetime


class AuditReportResponse(BaseModel):
    """Full integrity audit of an election."""

    model_config = ConfigDict(from_attributes=True)

    election_id: UUID
    generated_at: datetime
    summary: ValidationStatusResponse
    vote_checks: List[IntegrityCheckResponse]
    recommendations: List[str]


class BatchVerifyRequest(BaseModel):
    """Request to verify several votes at once."""

    vote_ids: List[UUID] = Field(..., min_length=1, description="Votes to verify")


class BatchVerifySummary(BaseModel):
    intact: int
    compromised: int
    ledger_confirmed: int


class BatchVerifyResponse(BaseModel):
    """Per-vote results of a batch verification."""

    total_votes: int
    results: List[IntegrityCheckResponse]
    summary: BatchVerifySummary
    timestamp: datetime


class RevalidationResponse(BaseModel):
    """Integrity check that was written back to the vote."""

    vote_id: UUID
    integrity_check: IntegrityCheckResponse
    updated: bool = True


class LedgerSyncResponse(BaseModel):
    """Snapshot stored by a ledger sync."""

    model_config = ConfigDict(from_attributes=True)

    election_id: UUID
    total_votes: int
    validated_votes: int
    pending_validation: int
    invalid_votes: int
    integrity_score: int
    ledger_synced: bool
    network_status: Optional[dict]
    last_sync_time: datetime
