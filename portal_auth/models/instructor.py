"""Instructor model."""

from sqlalchemy import Column, DateTime, String

from portal_auth.database import Base, utcnow
from portal_auth.models.user import new_account_id


class Instructor(Base):
    """Instructor account. Stored apart from end-users and never shares sessions with them."""

    __tablename__ = "instructors"

    id = Column(String(32), primary_key=True, default=new_account_id)
    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
