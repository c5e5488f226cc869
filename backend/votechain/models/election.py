"""
Election and Candidate database models.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, String, DateTime, Text, Integer, Boolean, ForeignKey, Enum, TypeDecorator, CHAR
from sqlalchemy.orm import relationship
import enum

from votechain.core.database import Base


class GUID(TypeDecorator):
    """Platform-independent GUID type for SQLite and PostgreSQL."""
    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            from sqlalchemy.dialects.postgresql import UUID
            return dialect.type_descriptor(UUID())
        else:
            return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        elif dialect.name == 'postgresql':
            return str(value)
        else:
            if isinstance(value, uuid.UUID):
                return str(value)
            else:
                return str(uuid.UUID(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, uuid.UUID):
            return uuid.UUID(value)
        return value


class ElectionStatus(str, enum.Enum):
    """Election status enumeration."""
    DRAFT = "draft"
    ACTIVE = "active"
    ENDED = "ended"


class VotingPolicy(str, enum.Enum):
    """How many candidates a single vote may select."""
    SINGLE = "single"
    MULTIPLE = "multiple"


def derive_election_status(
    now: datetime,
    start_time: datetime,
    end_time: datetime
) -> ElectionStatus:
    """Derive an election's status from the wall clock and its voting window."""
    if now < start_time:
        return ElectionStatus.DRAFT
    if now > end_time:
        return ElectionStatus.ENDED
    return ElectionStatus.ACTIVE


class Election(Base):
    """Election model representing a voting event."""

    __tablename__ = "elections"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    # Timing
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)

    # Voting rules
    voting_policy = Column(
        Enum(VotingPolicy),
        default=VotingPolicy.SINGLE,
        nullable=False
    )
    requires_registration = Column(Boolean, default=False, nullable=False)

    # Only set when a status was forced at creation
    status_override = Column(Enum(ElectionStatus), nullable=True)

    vote_count = Column(Integer, default=0, nullable=False)

    # Audit trail
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    creator_id = Column(GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    candidates = relationship("Candidate", back_populates="election", cascade="all, delete-orphan", passive_deletes=True)
    votes = relationship("Vote", back_populates="election", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Election(id={self.id}, title='{self.title}')>"

    def status_at(self, now: Optional[datetime] = None) -> ElectionStatus:
        """Status of the election at ``now`` (defaults to the current time)."""
        if self.status_override is not None:
            return self.status_override
        return derive_election_status(now or datetime.utcnow(), self.start_time, self.end_time)

    @property
    def status(self) -> ElectionStatus:
        return self.status_at()

    @property
    def is_active(self) -> bool:
        """Check if the election is currently accepting votes."""
        return self.status == ElectionStatus.ACTIVE


class Candidate(Base):
    """Candidate model representing a voting option."""

    __tablename__ = "candidates"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    election_id = Column(
        GUID(),
        ForeignKey("elections.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    election = relationship("Election", back_populates="candidates")

    def __repr__(self) -> str:
        return f"<Candidate(id={self.id}, name='{self.name}')>"
