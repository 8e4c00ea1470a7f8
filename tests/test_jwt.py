"""Tests for session token issuance and validation."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from portal_auth.config import get_settings
from portal_auth.exceptions import RejectReason, TokenRejected
from portal_auth.services.jwt import RESET_PURPOSE, RESET_TOKEN_TTL, SESSION_TOKEN_TTL, JWTService, SubjectKind

SECRET = "unit-test-secret-0123456789abcdef"
T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def service_at(moment: datetime, secret: str = SECRET) -> JWTService:
    return JWTService(secret_key=secret, algorithm="HS256", clock=lambda: moment)


class TestIssueAndValidate:
    def test_round_trip(self):
        service = service_at(T0)
        token = service.issue(SubjectKind.USER, "abc123", SESSION_TOKEN_TTL)
        assert service.validate(token, SubjectKind.USER) == "abc123"

    def test_claims_use_kind_specific_key(self):
        token = service_at(T0).issue(SubjectKind.INSTRUCTOR, "inst9", SESSION_TOKEN_TTL)
        claims = jwt.get_unverified_claims(token)
        assert claims["instructorId"] == "inst9"
        assert "userId" not in claims
        assert claims["exp"] - claims["iat"] == int(SESSION_TOKEN_TTL.total_seconds())

    def test_tokens_are_unique(self):
        service = service_at(T0)
        first = service.issue(SubjectKind.USER, "abc123", RESET_TOKEN_TTL)
        second = service.issue(SubjectKind.USER, "abc123", RESET_TOKEN_TTL)
        assert first != second

    def test_user_token_rejected_for_instructor(self):
        service = service_at(T0)
        token = service.issue(SubjectKind.USER, "abc123", SESSION_TOKEN_TTL)
        with pytest.raises(TokenRejected) as exc_info:
            service.validate(token, SubjectKind.INSTRUCTOR)
        assert exc_info.value.reason == RejectReason.WRONG_KIND

    def test_instructor_token_rejected_for_user(self):
        service = service_at(T0)
        token = service.issue(SubjectKind.INSTRUCTOR, "inst9", SESSION_TOKEN_TTL)
        with pytest.raises(TokenRejected) as exc_info:
            service.validate(token, SubjectKind.USER)
        assert exc_info.value.reason == RejectReason.WRONG_KIND

    def test_reset_token_roundtrip(self):
        service = service_at(T0)
        token = service.issue(SubjectKind.USER, "abc123", RESET_TOKEN_TTL, RESET_PURPOSE)
        assert service.validate(token, SubjectKind.USER, RESET_PURPOSE) == "abc123"

    def test_reset_token_is_not_a_session(self):
        service = service_at(T0)
        token = service.issue(SubjectKind.USER, "abc123", RESET_TOKEN_TTL, RESET_PURPOSE)
        with pytest.raises(TokenRejected) as exc_info:
            service.validate(token, SubjectKind.USER)
        assert exc_info.value.reason == RejectReason.WRONG_KIND

    def test_session_token_is_not_a_reset_token(self):
        service = service_at(T0)
        token = service.issue(SubjectKind.USER, "abc123", SESSION_TOKEN_TTL)
        with pytest.raises(TokenRejected) as exc_info:
            service.validate(token, SubjectKind.USER, RESET_PURPOSE)
        assert exc_info.value.reason == RejectReason.WRONG_KIND


class TestExpiry:
    def test_valid_just_before_expiry(self):
        token = service_at(T0).issue(SubjectKind.USER, "abc123", RESET_TOKEN_TTL)
        later = service_at(T0 + RESET_TOKEN_TTL - timedelta(seconds=1))
        assert later.validate(token, SubjectKind.USER) == "abc123"

    def test_expired_at_exact_expiry(self):
        token = service_at(T0).issue(SubjectKind.USER, "abc123", RESET_TOKEN_TTL)
        with pytest.raises(TokenRejected) as exc_info:
            service_at(T0 + RESET_TOKEN_TTL).validate(token, SubjectKind.USER)
        assert exc_info.value.reason == RejectReason.EXPIRED

    def test_expired_reports_expiry_not_signature(self):
        token = service_at(T0).issue(SubjectKind.USER, "abc123", SESSION_TOKEN_TTL)
        with pytest.raises(TokenRejected) as exc_info:
            service_at(T0 + timedelta(days=30)).validate(token, SubjectKind.USER)
        assert exc_info.value.reason == RejectReason.EXPIRED


class TestRejection:
    def test_wrong_secret(self):
        token = service_at(T0, secret="another-secret-0123456789abcdef").issue(
            SubjectKind.USER, "abc123", SESSION_TOKEN_TTL
        )
        with pytest.raises(TokenRejected) as exc_info:
            service_at(T0).validate(token, SubjectKind.USER)
        assert exc_info.value.reason == RejectReason.BAD_SIGNATURE

    def test_tampered_subject(self):
        """Grafting another token's payload onto a signature breaks the signature."""
        service = service_at(T0)
        victim = service.issue(SubjectKind.USER, "victim", SESSION_TOKEN_TTL)
        attacker = service.issue(SubjectKind.USER, "attacker", SESSION_TOKEN_TTL)
        header, _, signature = attacker.split(".")
        forged = ".".join([header, victim.split(".")[1], signature])
        with pytest.raises(TokenRejected) as exc_info:
            service.validate(forged, SubjectKind.USER)
        assert exc_info.value.reason == RejectReason.BAD_SIGNATURE

    @pytest.mark.parametrize("token", ["not-a-token", "abc.def", ""])
    def test_malformed(self, token: str):
        with pytest.raises(TokenRejected) as exc_info:
            service_at(T0).validate(token, SubjectKind.USER)
        assert exc_info.value.reason == RejectReason.MALFORMED

    def test_missing_expiry_is_malformed(self):
        token = jwt.encode({"userId": "abc123"}, SECRET, algorithm="HS256")
        with pytest.raises(TokenRejected) as exc_info:
            service_at(T0).validate(token, SubjectKind.USER)
        assert exc_info.value.reason == RejectReason.MALFORMED


class TestSecretLoading:
    def test_production_requires_secret(self, monkeypatch):
        settings = get_settings()
        monkeypatch.setattr(settings, "APP_ENV", "production")
        monkeypatch.setattr(settings, "JWT_SECRET_KEY", "")
        with pytest.raises(RuntimeError):
            JWTService()

    def test_development_generates_secret(self, monkeypatch):
        settings = get_settings()
        monkeypatch.setattr(settings, "APP_ENV", "development")
        monkeypatch.setattr(settings, "JWT_SECRET_KEY", "")
        service = JWTService()
        assert service.secret_key
        token = service.issue(SubjectKind.USER, "abc123", SESSION_TOKEN_TTL)
        assert service.validate(token, SubjectKind.USER) == "abc123"

    def test_uses_configured_secret(self):
        assert JWTService().secret_key == get_settings().JWT_SECRET_KEY
