"""
API dependencies for authentication, persistence and the ledger client.
"""
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from votechain.core.database import get_db
from votechain.core.security import decode_token
from votechain.ledger.ledger_client import LedgerClient
from votechain.models.election import Election
from votechain.models.user import User
from votechain.services.auth_service import AuthService
from votechain.services.vote_service import VoteService
from votechain.services.verification_service import VerificationService
from votechain.store.vote_store import VoteStore


security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """
    Get the current authenticated user from the JWT token.
    Returns None if no valid token is provided.
    """
    if not credentials:
        return None

    payload = decode_token(credentials.credentials)
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    auth_service = AuthService(db)
    user = await auth_service.get_user_by_id(user_id)

    if not user or not user.is_active:
        return None

    return user


async def require_authentication(
    current_user: Optional[User] = Depends(get_current_user)
) -> User:
    """
    Require a valid authenticated user.
    Raises 401 if not authenticated.
    """
    if not current_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user


def ensure_owner(election: Election, user: User) -> None:
    """Only the creator of an election may inspect its integrity data."""
    if election.creator_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized access to election"
        )


def get_ledger_client(request: Request) -> LedgerClient:
    """The process-wide ledger client created in the application lifespan."""
    return request.app.state.ledger


async def get_vote_store(db: AsyncSession = Depends(get_db)) -> VoteStore:
    return VoteStore(db)


async def get_vote_service(
    store: VoteStore = Depends(get_vote_store),
    ledger: LedgerClient = Depends(get_ledger_client)
) -> VoteService:
    return VoteService(store, ledger)


async def get_verification_service(
    store: VoteStore = Depends(get_vote_store),
    ledger: LedgerClient = Depends(get_ledger_client)
) -> VerificationService:
    return VerificationService(store, ledger)
