"""
Election-related Pydantic schemas.
"""
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from votechain.models.election import ElectionStatus, VotingPolicy


class CandidateCreate(BaseModel):
    """Schema for creating a candidate."""

    name: str = Field(..., min_length=1, max_length=100, description="Candidate name")
    description: Optional[str] = Field(None, description="Candidate description")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Candidate name must not be blank")
        return v


class CandidateResponse(BaseModel):
    """Schema for candidate response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    election_id: UUID
    name: str
    description: Optional[str]


class ElectionCreate(BaseModel):
    """Schema for creating an election."""

    title: str = Field(..., min_length=1, max_length=200, description="Election title")
    description: Optional[str] = Field(None, description="Election description")
    start_time: Optional[datetime] = Field(None, description="Voting opens (defaults to now)")
    end_time: Optional[datetime] = Field(
        None,
        description="Voting closes (defaults to a week after start)"
    )
    candidates: List[CandidateCreate] = Field(
        ...,
        min_length=2,
        description="List of candidates"
    )
    voting_policy: VotingPolicy = Field(
        default=VotingPolicy.SINGLE,
        description="single: one candidate per vote, multiple: any number"
    )
    requires_registration: bool = Field(
        default=False,
        description="Whether voters must supply an email"
    )
    status: Optional[ElectionStatus] = Field(
        None,
        description="Force a status instead of deriving it from the voting window"
    )

    @field_validator("start_time", "end_time")
    @classmethod
    def as_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Times are stored as naive UTC
        if v is not None and v.tzinfo is not None:
            v = (v - v.utcoffset()).replace(tzinfo=None)
        return v

    @model_validator(mode="after")
    def end_time_after_start_time(self) -> "ElectionCreate":
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ElectionResponse(BaseModel):
    """Schema for election response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str]
    status: ElectionStatus
    start_time: datetime
    end_time: datetime
    voting_policy: VotingPolicy
    requires_registration: bool
    vote_count: int
    creator_id: Optional[UUID]
    candidates: List[CandidateResponse]
    is_active: bool
    created_at: datetime


class ElectionListResponse(BaseModel):
    """Schema for election list response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    status: ElectionStatus
    start_time: datetime
    end_time: datetime
    voting_policy: VotingPolicy
    vote_count: int
    is_active: bool


class CandidateResult(BaseModel):
    """Votes received by one candidate."""

    candidate_id: UUID
    candidate_name: str
    vote_count: int
    percentage: float


class ElectionResultsResponse(BaseModel):
    """Tallied results of an election."""

    election_id: UUID
    title: str
    status: ElectionStatus
    total_votes: int
    results: List[CandidateResult]
