"""
Vote-related Pydantic schemas.
"""
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field, field_validator

from votechain.models.vote import AnchorStatus


class VoteSubmitRequest(BaseModel):
    """Request to cast a vote in an election."""

    candidate_ids: List[str] = Field(
        ...,
        description="IDs of the selected candidates"
    )
    voter_email: Optional[str] = Field(
        None,
        max_length=255,
        pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$",
        description="Voter email, required when the election demands registration"
    )

    @field_validator("voter_email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class VoteSubmitResponse(BaseModel):
    """Response after vote submission."""

    message: str = Field(default="Vote submitted successfully!")
    vote_id: UUID = Field(..., description="ID of the stored vote")
    election_id: UUID = Field(..., description="Election ID")
    vote_hash: str = Field(..., description="Content fingerprint of the vote")
    anchor: str = Field(..., description="anchored or unanchored")
    anchor_status: AnchorStatus = Field(..., description="Stored ledger anchor state")
    ledger_tx_ref: Optional[str] = Field(None, description="Ledger transaction reference")
    ledger_block_height: Optional[int] = Field(None, description="Block containing the anchor")
    timestamp: datetime = Field(..., description="Vote submission timestamp")
