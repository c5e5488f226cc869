"""
User database model.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Boolean

from votechain.core.database import Base
from votechain.models.election import GUID


class User(Base):
    """
    Registered account that can create and audit elections.
    Voters do not need an account; a vote only carries an optional email.
    """

    __tablename__ = "users"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)

    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(100), nullable=True)
    hashed_password = Column(String(255), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
