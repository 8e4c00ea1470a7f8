"""Pydantic schemas for authentication endpoints.

Request fields are optional so a missing field reaches the service and gets
the endpoint's own 400 message.
"""

from pydantic import BaseModel, Field

from portal_auth.services.geolocation import Location


class SignupRequest(BaseModel):
    firstName: str | None = None
    lastName: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: str | None = None
    language: str | None = None


class ResetPasswordRequest(BaseModel):
    token: str | None = None
    newPassword: str | None = None


class MessageResponse(BaseModel):
    message: str


class SignupResponse(BaseModel):
    message: str
    location: Location


class LoginResponse(BaseModel):
    message: str
    package: str | None
    userId: str
    token: str
    location: Location


class InstructorLoginResponse(BaseModel):
    message: str
    isInstructor: bool = True
    instructorId: str
    token: str


class LocationUpdateResponse(BaseModel):
    success: bool = True
    message: str
    location: Location


class ProfileResponse(BaseModel):
    email: str
    package: str | None
    courses: list = Field(default_factory=list)
    firstName: str
    lastName: str
    role: str
