"""Account persistence.

One ``AccountStore`` per account variant; end-users and instructors live in
separate tables and never share lookups. Storage errors are logged here and
surfaced as ``DependencyFailure`` so nothing internal reaches a client.
"""

import logging
from datetime import datetime
from typing import Generic, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal_auth.exceptions import ConflictError, DependencyFailure
from portal_auth.models.instructor import Instructor
from portal_auth.models.user import User

logger = logging.getLogger("portal_auth")

AccountT = TypeVar("AccountT", User, Instructor)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountStore(Generic[AccountT]):
    """Find and save accounts of one variant."""

    def __init__(self, model: type[AccountT]) -> None:
        self.model = model

    async def find_by_email(self, db: AsyncSession, email: str) -> AccountT | None:
        try:
            result = await db.execute(select(self.model).where(func.lower(self.model.email) == normalize_email(email)))
        except SQLAlchemyError:
            logger.exception("Lookup by email failed on %s", self.model.__tablename__)
            raise DependencyFailure() from None
        return result.scalars().first()

    async def find_by_id(self, db: AsyncSession, account_id: str) -> AccountT | None:
        try:
            return await db.get(self.model, account_id)
        except SQLAlchemyError:
            logger.exception("Lookup by id failed on %s", self.model.__tablename__)
            raise DependencyFailure() from None

    async def save(self, db: AsyncSession, account: AccountT) -> AccountT:
        """Insert or update the account. A duplicate email raises ConflictError."""
        account.email = normalize_email(account.email)
        db.add(account)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Email already registered.") from None
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Save failed on %s", self.model.__tablename__)
            raise DependencyFailure() from None
        return account


class UserStore(AccountStore[User]):
    def __init__(self) -> None:
        super().__init__(User)

    async def consume_reset_token(
        self,
        db: AsyncSession,
        user_id: str,
        token: str,
        password_hash: str,
        now: datetime,
    ) -> bool:
        """Set a new password only if ``token`` is still the pending, unexpired reset token.

        The check and the clear happen in one UPDATE, so two concurrent
        consumers of the same token cannot both succeed.
        """
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.reset_token == token,
                User.reset_token_expires_at > now,
            )
            .values(password_hash=password_hash, reset_token=None, reset_token_expires_at=None)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Reset token consumption failed")
            raise DependencyFailure() from None
        return result.rowcount == 1


users = UserStore()
instructors: AccountStore[Instructor] = AccountStore(Instructor)
