"""
Authentication API endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from votechain.core.database import get_db
from votechain.services.auth_service import AuthService
from votechain.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
    UserInfoResponse,
)
from votechain.api.v1.deps import require_authentication
from votechain.models.user import User


router = APIRouter()


@router.post("/register", response_model=UserInfoResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db)
) -> UserInfoResponse:
    """Create an account for an election organiser."""
    auth_service = AuthService(db)

    user, error = await auth_service.register(
        email=request.email,
        password=request.password,
        full_name=request.full_name
    )

    if error:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=error
        )

    return UserInfoResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db)
) -> TokenResponse:
    """Exchange email and password for a bearer token."""
    auth_service = AuthService(db)

    user = await auth_service.authenticate(request.email, request.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(access_token=auth_service.issue_token(user))


@router.get("/me", response_model=UserInfoResponse)
async def get_me(
    current_user: User = Depends(require_authentication)
) -> UserInfoResponse:
    """Get the signed-in user."""
    return UserInfoResponse.model_validate(current_user)
