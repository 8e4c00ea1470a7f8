"""User model."""

import uuid

from sqlalchemy import JSON, Column, DateTime, String

from portal_auth.database import Base, utcnow

UNKNOWN = "Unknown"


def new_account_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """End-user account."""

    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_account_id)
    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    role = Column(String(64), nullable=False, default="user")
    package = Column(String(64), nullable=True)
    courses = Column(JSON, nullable=False, default=list)
    city = Column(String(128), nullable=False, default=UNKNOWN)
    state = Column(String(128), nullable=False, default=UNKNOWN)
    country = Column(String(128), nullable=False, default=UNKNOWN)
    reset_token = Column(String(512), nullable=True, index=True)
    reset_token_expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
