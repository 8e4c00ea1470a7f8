"""Dependencies and cookie helpers for FastAPI routes."""

from fastapi import Depends, Response

from portal_auth.config import get_settings
from portal_auth.services.auth import AuthService
from portal_auth.services.email import EmailService, get_email_service
from portal_auth.services.geolocation import GeolocationService, get_geolocation_service
from portal_auth.services.jwt import SESSION_TOKEN_TTL, JWTService, get_jwt_service
from portal_auth.services.password_reset import PasswordResetService
from portal_auth.services.session import USER_COOKIE_NAME

COOKIE_MAX_AGE = int(SESSION_TOKEN_TTL.total_seconds())  # 2 days


def get_auth_service(
    jwt_service: JWTService = Depends(get_jwt_service),
    geolocation: GeolocationService = Depends(get_geolocation_service),
) -> AuthService:
    return AuthService(jwt_service, geolocation)


def get_password_reset_service(
    jwt_service: JWTService = Depends(get_jwt_service),
    email_service: EmailService = Depends(get_email_service),
) -> PasswordResetService:
    return PasswordResetService(jwt_service, email_service)


def set_auth_cookie(response: Response, token: str, cookie_name: str = USER_COOKIE_NAME) -> None:
    """Set a session cookie. Cross-site delivery (SameSite=None; Secure) only in production."""
    production = get_settings().is_production
    response.set_cookie(
        key=cookie_name,
        value=token,
        httponly=True,
        samesite="none" if production else "lax",
        secure=production,
        max_age=COOKIE_MAX_AGE,
    )

