"""
Security utilities: access tokens, password hashing and vote fingerprints.
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, Iterable
import hashlib
import json

from jose import jwt, JWTError
from passlib.context import CryptContext

from votechain.core.config import settings


# Password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({
        "exp": expire,
        "iat": datetime.utcnow(),
        "type": "access"
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify a JWT token."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        return None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def compute_vote_hash(
    election_id: object,
    candidate_ids: Iterable[object],
    voter_email: Optional[str],
    timestamp: datetime,
    salt: str
) -> str:
    """
    Compute the content fingerprint of a vote.

    Candidate ids are sorted before serialisation so that the order in
    which a voter picked them never changes the fingerprint. The result is
    a 64 character SHA-256 hex digest.
    """
    payload = {
        "election_id": str(election_id),
        "candidate_ids": sorted(str(candidate_id) for candidate_id in candidate_ids),
        "voter_email": voter_email,
        "timestamp": timestamp.isoformat(),
        "salt": salt,
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()


def compute_voter_hash(email: str, election_id: object, salt: str) -> str:
    """
    Anonymise a voter for the anchor layer.
    Deterministic per (email, election), so it can flag repeat voters
    without the plaintext email ever leaving the database.
    """
    data = f"{email}:{election_id}:{salt}"
    return hashlib.sha256(data.encode()).hexdigest()
