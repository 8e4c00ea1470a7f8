"""JWT Token Service."""

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from enum import Enum

from jose import JWTError, jwt

from portal_auth.config import get_settings
from portal_auth.exceptions import RejectReason, TokenRejected

logger = logging.getLogger("portal_auth")

SESSION_TOKEN_TTL = timedelta(days=2)
RESET_TOKEN_TTL = timedelta(hours=1)

# Purpose claim carried by password reset tokens. Session tokens carry none.
RESET_PURPOSE = "password_reset"


class SubjectKind(str, Enum):
    """Claim name the subject id is stored under. Kinds are not interchangeable."""

    USER = "userId"
    INSTRUCTOR = "instructorId"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JWTService:
    """Issues and validates signed, time-bounded tokens."""

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        settings = get_settings()
        self.secret_key = secret_key or settings.JWT_SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self._clock = clock or _utc_now
        if not self.secret_key:
            if settings.is_production:
                raise RuntimeError("JWT_SECRET_KEY must be set in production")
            logger.warning("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
            self.secret_key = secrets.token_urlsafe(32)

    def now(self) -> datetime:
        """Current time as seen by this service (timezone-aware UTC)."""
        return self._clock()

    def issue(self, kind: SubjectKind, subject_id: str, ttl: timedelta, purpose: str | None = None) -> str:
        """Create a token for the subject, valid for ``ttl`` from now."""
        issued_at = self.now()
        payload = {
            kind.value: str(subject_id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ttl).timestamp()),
            "jti": secrets.token_hex(8),
        }
        if purpose:
            payload["purpose"] = purpose
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def validate(self, token: str, expected_kind: SubjectKind, purpose: str | None = None) -> str:
        """Return the subject id carried by the token.

        Raises TokenRejected. Expiry is only checked once the signature has
        verified, so an expired genuine token always reports EXPIRED. A token
        whose purpose differs from ``purpose`` is rejected as WRONG_KIND, so a
        reset token never passes as a session and vice versa.
        """
        try:
            jwt.get_unverified_claims(token)
        except JWTError:
            raise TokenRejected(RejectReason.MALFORMED) from None

        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            raise TokenRejected(RejectReason.BAD_SIGNATURE) from None

        expires_at = claims.get("exp")
        if not isinstance(expires_at, int | float) or isinstance(expires_at, bool):
            raise TokenRejected(RejectReason.MALFORMED)
        if self.now().timestamp() >= expires_at:
            raise TokenRejected(RejectReason.EXPIRED)

        subject_id = claims.get(expected_kind.value)
        if not subject_id or claims.get("purpose") != purpose:
            raise TokenRejected(RejectReason.WRONG_KIND)
        return str(subject_id)


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service
