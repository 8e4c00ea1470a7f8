"""Password reset workflow.

An account is either idle or has one pending reset: ``reset_token`` and
``reset_token_expires_at`` are set together by ``request_reset`` and cleared
together when the token is consumed. A newer request overwrites the pending
token, which makes any earlier one unusable.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from portal_auth.config import get_settings
from portal_auth.exceptions import EmailDeliveryError, InvalidResetTokenError, TokenRejected
from portal_auth.services.email import EmailService, render_password_reset_email
from portal_auth.services.jwt import RESET_PURPOSE, RESET_TOKEN_TTL, JWTService, SubjectKind
from portal_auth.services.password import hash_password
from portal_auth.store import UserStore, users

logger = logging.getLogger("portal_auth")


class PasswordResetService:
    """Issues single-use reset tokens and redeems them for a new password."""

    def __init__(self, jwt_service: JWTService, email_service: EmailService, store: UserStore = users) -> None:
        self.jwt_service = jwt_service
        self.email_service = email_service
        self.store = store

    def _stored_now(self) -> datetime:
        return self.jwt_service.now().replace(tzinfo=None)

    async def request_reset(self, db: AsyncSession, email: str, language: str | None = None) -> bool:
        """Start a reset for the account with this email.

        Returns False when no account matches; callers must not reveal that.
        Raises DependencyFailure if the token cannot be stored (no email is
        sent in that case) and EmailDeliveryError if sending fails.
        """
        user = await self.store.find_by_email(db, email)
        if not user:
            logger.info("Password reset requested for unregistered email")
            return False

        token = self.jwt_service.issue(SubjectKind.USER, user.id, RESET_TOKEN_TTL, RESET_PURPOSE)
        user.reset_token = token
        user.reset_token_expires_at = self._stored_now() + RESET_TOKEN_TTL
        await self.store.save(db, user)

        reset_link = f"{get_settings().FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
        rendered = render_password_reset_email(language, user.first_name, reset_link)
        sent = await self.email_service.send_mail(user.email, rendered.subject, rendered.text, rendered.html)
        if not sent:
            raise EmailDeliveryError()

        logger.info("Password reset email sent for user %s", user.id)
        return True

    async def consume_reset(self, db: AsyncSession, token: str, new_password: str) -> None:
        """Replace the password if ``token`` is the account's current, unexpired reset token.

        Every failure raises InvalidResetTokenError with the same message.
        """
        try:
            user_id = self.jwt_service.validate(token, SubjectKind.USER, RESET_PURPOSE)
        except TokenRejected as e:
            logger.info("Reset token rejected: %s", e.reason.value)
            raise InvalidResetTokenError() from None

        now = self._stored_now()
        user = await self.store.find_by_id(db, user_id)
        if (
            not user
            or user.reset_token != token
            or user.reset_token_expires_at is None
            or user.reset_token_expires_at <= now
        ):
            raise InvalidResetTokenError()

        password_hash = await run_in_threadpool(hash_password, new_password)
        consumed = await self.store.consume_reset_token(db, user_id, token, password_hash, now)
        if not consumed:
            raise InvalidResetTokenError()
        logger.info("Password reset completed for user %s", user_id)
