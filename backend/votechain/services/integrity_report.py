"""
Integrity aggregation: vote classification, scoring and audit recommendations.
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
import uuid

from votechain.models.vote import Vote


HASH_MISMATCH = "Vote hash mismatch - possible tampering detected"
LEDGER_VALIDATION_FAILED = "Ledger validation failed"
LEDGER_STATUS_UNKNOWN = "Could not verify ledger status"


@dataclass
class IntegrityCheckResult:
    """Outcome of re-verifying one stored vote."""
    vote_id: uuid.UUID
    original_hash: str
    current_hash: str
    is_intact: bool
    ledger_confirmed: bool
    anomalies: List[str] = field(default_factory=list)
    checked_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def failed(cls, vote_id: uuid.UUID, reason: str) -> "IntegrityCheckResult":
        """Result for a vote that could not be verified at all."""
        return cls(
            vote_id=vote_id,
            original_hash="",
            current_hash="",
            is_intact=False,
            ledger_confirmed=False,
            anomalies=[f"Verification failed: {reason}"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ElectionValidationStatus:
    """Per-election integrity statistics, computed on demand."""
    election_id: uuid.UUID
    total_votes: int
    validated_votes: int
    pending_validation: int
    invalid_votes: int
    ledger_synced: bool
    integrity_score: int
    last_sync_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AuditReport:
    election_id: uuid.UUID
    generated_at: datetime
    summary: ElectionValidationStatus
    vote_checks: List[IntegrityCheckResult]
    recommendations: List[str]


def compute_integrity_score(validated_votes: int, total_votes: int) -> int:
    """
    Percentage of confirmed votes, rounded half up.
    An election without votes scores 100.
    """
    if total_votes <= 0:
        return 100
    validated_votes = max(0, min(validated_votes, total_votes))
    return (validated_votes * 200 + total_votes) // (2 * total_votes)


def classify_votes(votes: Iterable[Vote]) -> Tuple[int, int, int]:
    """
    Split votes into (validated, pending, invalid) by their anchor flags.

    validated: ledger-confirmed. pending: has a transaction reference but is
    not confirmed yet. invalid: everything else.
    """
    validated = pending = invalid = 0
    for vote in votes:
        if vote.ledger_confirmed:
            validated += 1
        elif vote.ledger_tx_ref:
            pending += 1
        else:
            invalid += 1
    return validated, pending, invalid


def build_recommendations(
    status: ElectionValidationStatus,
    checks: List[IntegrityCheckResult],
    score_threshold: int = 90,
) -> List[str]:
    """Evaluate every audit rule and collect all that apply."""
    recommendations = []

    if status.integrity_score < score_threshold:
        recommendations.append("Low integrity score - investigate anomalies")

    if not status.ledger_synced:
        recommendations.append("Ledger sync required")

    if status.invalid_votes > 0:
        recommendations.append("Invalid votes detected - manual review")

    anomaly_count = sum(1 for check in checks if check.anomalies)
    if anomaly_count > 0:
        recommendations.append(f"{anomaly_count} votes have integrity issues")

    return recommendations


def summarize_checks(checks: List[IntegrityCheckResult]) -> Dict[str, int]:
    return {
        "intact": sum(1 for check in checks if check.is_intact),
        "compromised": sum(1 for check in checks if not check.is_intact),
        "ledger_confirmed": sum(1 for check in checks if check.ledger_confirmed),
    }


def build_validation_status(
    election_id: uuid.UUID,
    votes: List[Vote],
    ledger_synced: bool,
    now: Optional[datetime] = None
) -> ElectionValidationStatus:
    validated, pending, invalid = classify_votes(votes)
    total = len(votes)
    return ElectionValidationStatus(
        election_id=election_id,
        total_votes=total,
        validated_votes=validated,
        pending_validation=pending,
        invalid_votes=invalid,
        ledger_synced=ledger_synced,
        integrity_score=compute_integrity_score(validated, total),
        last_sync_time=now or datetime.utcnow(),
    )
