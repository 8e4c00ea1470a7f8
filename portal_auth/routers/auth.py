"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from portal_auth.database import get_db
from portal_auth.dependencies import get_auth_service, get_password_reset_service, set_auth_cookie
from portal_auth.exceptions import AuthError, DependencyFailure
from portal_auth.schemas.auth import (
    ForgotPasswordRequest,
    InstructorLoginResponse,
    LocationUpdateResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    ResetPasswordRequest,
    SignupRequest,
    SignupResponse,
)
from portal_auth.services.auth import AuthService
from portal_auth.services.password_reset import PasswordResetService
from portal_auth.services.session import INSTRUCTOR_COOKIE_NAME

logger = logging.getLogger("portal_auth")

router = APIRouter(tags=["Authentication"])

RESET_SENT_MESSAGE = "If that email exists, a reset link has been sent."


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/signup", status_code=201, response_model=SignupResponse)
async def signup(
    request: Request,
    body: SignupRequest,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new user account."""
    try:
        location = await auth_service.signup(
            db, request, body.firstName, body.lastName, body.email, body.password, body.role
        )
    except DependencyFailure:
        return _message(500, "Internal server error.")
    except AuthError as e:
        return _message(e.status_code, e.message)

    return SignupResponse(message="User registered successfully.", location=location)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Authenticate and receive a session token (also set as a cookie)."""
    try:
        result = await auth_service.login(db, request, body.email, body.password)
    except DependencyFailure:
        return _message(500, "Server error")
    except AuthError as e:
        return _message(e.status_code, e.message)

    set_auth_cookie(response, result.token)
    return LoginResponse(
        message="Login successful",
        package=result.package,
        userId=result.user_id,
        token=result.token,
        location=result.location,
    )


@router.put("/update-location", response_model=LocationUpdateResponse)
async def update_location(
    request: Request,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Re-derive the session user's location from this request."""
    try:
        location = await auth_service.refresh_location(db, request)
    except DependencyFailure:
        return _error(500, "Error updating location")
    except AuthError as e:
        return _error(e.status_code, e.message)

    return LocationUpdateResponse(message="Location updated successfully", location=location)


@router.post("/instructor-login", response_model=InstructorLoginResponse)
async def instructor_login(
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Authenticate an instructor and receive an instructor session token."""
    try:
        result = await auth_service.instructor_login(db, body.email, body.password)
    except DependencyFailure:
        return _message(500, "Server error")
    except AuthError as e:
        return _message(e.status_code, e.message)

    set_auth_cookie(response, result.token, INSTRUCTOR_COOKIE_NAME)
    return InstructorLoginResponse(
        message="Instructor login successful",
        instructorId=result.instructor_id,
        token=result.token,
    )


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    reset_service: PasswordResetService = Depends(get_password_reset_service),
):
    """Email a reset link. The response is the same whether or not the account exists."""
    if not body.email:
        return _message(400, "Email is required.")

    try:
        await reset_service.request_reset(db, body.email, body.language)
    except AuthError as e:
        return _message(e.status_code, e.message)

    return MessageResponse(message=RESET_SENT_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    reset_service: PasswordResetService = Depends(get_password_reset_service),
):
    """Set a new password using a reset token."""
    if not body.token or not body.newPassword:
        return _message(400, "Token and new password are required.")

    try:
        await reset_service.consume_reset(db, body.token, body.newPassword)
    except DependencyFailure:
        return _message(400, "Invalid or expired token.")
    except AuthError as e:
        return _message(e.status_code, e.message)

    return MessageResponse(message="Password has been reset successfully.")


@router.get("/me", response_model=ProfileResponse)
async def me(
    request: Request,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Profile of the user owning the session."""
    try:
        profile = await auth_service.who_am_i(db, request)
    except AuthError as e:
        return _error(e.status_code, e.message)

    return ProfileResponse(
        email=profile.email,
        package=profile.package,
        courses=profile.courses,
        firstName=profile.first_name,
        lastName=profile.last_name,
        role=profile.role,
    )
