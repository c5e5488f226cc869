"""
Pydantic schemas for request/response validation.
"""
from votechain.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
    UserInfoResponse,
)
from votechain.schemas.election import (
    ElectionCreate,
    ElectionResponse,
    ElectionListResponse,
    ElectionResultsResponse,
    CandidateCreate,
    CandidateResponse,
)
from votechain.schemas.vote import (
    VoteSubmitRequest,
    VoteSubmitResponse,
)
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

__all__ = [
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "UserInfoResponse",
    # Election
    "ElectionCreate",
    "ElectionResponse",
    "ElectionListResponse",
    "ElectionResultsResponse",
    "CandidateCreate",
    "CandidateResponse",
    # Vote
    "VoteSubmitRequest",
    "VoteSubmitResponse",
    # Verification
    "IntegrityCheckResponse",
    "ValidationStatusResponse",
    "NetworkStatusResponse",
    "AuditReportResponse",
    "BatchVerifyRequest",
    "BatchVerifyResponse",
    "RevalidationResponse",
    "LedgerSyncResponse",
]
