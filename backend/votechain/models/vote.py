"""
Vote-related database models.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Integer, JSON, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
import enum

from votechain.core.database import Base
from votechain.models.election import GUID


class AnchorStatus(str, enum.Enum):
    """Ledger anchoring state of a stored vote."""
    # Ledger was not configured when the vote was stored
    UNANCHORED = "unanchored"
    # Transaction broadcast, receipt not seen yet
    PENDING = "pending"
    CONFIRMED = "confirmed"
    # Submission attempted and failed; retried on the next sync
    FAILED = "failed"


class Vote(Base):
    """
    A cast vote together with its integrity fingerprint.

    Rows are never edited after insert except to attach ledger anchor
    metadata and the outcome of later integrity checks.
    """

    __tablename__ = "votes"
    __table_args__ = (
        # NULL emails never collide, so anonymous votes are not constrained
        UniqueConstraint("election_id", "voter_email", name="uq_votes_election_voter_email"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    election_id = Column(
        GUID(),
        ForeignKey("elections.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Candidate ids as strings, in the order the voter selected them
    candidate_ids = Column(JSON, nullable=False)
    voter_email = Column(String(255), nullable=True)

    # Fingerprints
    vote_hash = Column(String(64), nullable=False)
    voter_hash = Column(String(64), nullable=True, index=True)

    # Ledger anchor
    anchor_status = Column(
        Enum(AnchorStatus),
        default=AnchorStatus.UNANCHORED,
        nullable=False
    )
    ledger_tx_ref = Column(String(66), nullable=True)
    ledger_confirmed = Column(Boolean, default=False, nullable=False)
    ledger_block_height = Column(Integer, nullable=True)

    # Part of the hashed content; must not change after insert
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Last integrity check written back by revalidation
    integrity_verified = Column(Boolean, nullable=True)
    last_integrity_check = Column(DateTime, nullable=True)
    validation_errors = Column(JSON, nullable=True)

    # Relationships
    election = relationship("Election", back_populates="votes")

    def __repr__(self) -> str:
        return f"<Vote(id={self.id}, anchor_status={self.anchor_status})>"


class LedgerSyncRecord(Base):
    """Snapshot of an election's validation status, written by a ledger sync."""

    __tablename__ = "ledger_sync_records"

    election_id = Column(
        GUID(),
        ForeignKey("elections.id", ondelete="CASCADE"),
        primary_key=True
    )

    total_votes = Column(Integer, default=0, nullable=False)
    validated_votes = Column(Integer, default=0, nullable=False)
    pending_validation = Column(Integer, default=0, nullable=False)
    invalid_votes = Column(Integer, default=0, nullable=False)
    integrity_score = Column(Integer, default=100, nullable=False)
    ledger_synced = Column(Boolean, default=False, nullable=False)
    network_status = Column(JSON, nullable=True)

    last_sync_time = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<LedgerSyncRecord(election_id={self.election_id}, score={self.integrity_score})>"
