"""Authentication service."""

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from portal_auth.exceptions import ConflictError, InvalidCredentialsError, NotFoundError, ValidationError
from portal_auth.models.instructor import Instructor
from portal_auth.models.user import UNKNOWN, User
from portal_auth.services.geolocation import GeolocationService, Location
from portal_auth.services.jwt import SESSION_TOKEN_TTL, JWTService, SubjectKind
from portal_auth.services.password import DUMMY_HASH, hash_password, verify_password
from portal_auth.services.session import authenticate_request
from portal_auth.store import AccountStore, UserStore, instructors, users

logger = logging.getLogger("portal_auth")


@dataclass
class LoginResult:
    """Result of a successful end-user login."""

    token: str
    user_id: str
    package: str | None
    location: Location


@dataclass
class InstructorLoginResult:
    token: str
    instructor_id: str


@dataclass
class Profile:
    email: str
    package: str | None
    first_name: str
    last_name: str
    role: str
    courses: list = field(default_factory=list)


def _location_of(user: User) -> Location:
    return Location(city=user.city or UNKNOWN, state=user.state or UNKNOWN, country=user.country or UNKNOWN)


def _apply_location(user: User, location: Location) -> None:
    user.city = location.city
    user.state = location.state
    user.country = location.country


class AuthService:
    """Handles signup, login and session-authenticated account operations."""

    def __init__(
        self,
        jwt_service: JWTService,
        geolocation: GeolocationService,
        user_store: UserStore = users,
        instructor_store: AccountStore[Instructor] = instructors,
    ) -> None:
        self.jwt_service = jwt_service
        self.geolocation = geolocation
        self.users = user_store
        self.instructors = instructor_store

    async def signup(
        self,
        db: AsyncSession,
        request: Request,
        first_name: str | None,
        last_name: str | None,
        email: str | None,
        password: str | None,
        role: str | None = None,
    ) -> Location:
        """Register a new end-user and return the location derived for them."""
        if not first_name or not last_name or not email or not password:
            raise ValidationError("All fields are required.")

        if await self.users.find_by_email(db, email):
            raise ConflictError("Email already registered.")

        password_hash = await run_in_threadpool(hash_password, password)
        location = self.geolocation.locate(request)
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=password_hash,
            role=role or "user",
            courses=[],
        )
        _apply_location(user, location)
        await self.users.save(db, user)

        logger.info("Registered user %s", user.id)
        return location

    async def login(self, db: AsyncSession, request: Request, email: str | None, password: str | None) -> LoginResult:
        """Authenticate an end-user and issue a session token."""
        user = await self.users.find_by_email(db, email) if email else None
        if not user:
            await run_in_threadpool(verify_password, password or "", DUMMY_HASH)
            raise InvalidCredentialsError()
        if not await run_in_threadpool(verify_password, password or "", user.password_hash):
            raise InvalidCredentialsError()

        if not user.city or user.city == UNKNOWN:
            _apply_location(user, self.geolocation.locate(request))
            await self.users.save(db, user)

        token = self.jwt_service.issue(SubjectKind.USER, user.id, SESSION_TOKEN_TTL)
        return LoginResult(token=token, user_id=user.id, package=user.package, location=_location_of(user))

    async def instructor_login(self, db: AsyncSession, email: str | None, password: str | None) -> InstructorLoginResult:
        """Authenticate an instructor and issue an instructor session token."""
        instructor = await self.instructors.find_by_email(db, email) if email else None
        if not instructor:
            await run_in_threadpool(verify_password, password or "", DUMMY_HASH)
            raise InvalidCredentialsError()
        if not await run_in_threadpool(verify_password, password or "", instructor.password_hash):
            raise InvalidCredentialsError()

        token = self.jwt_service.issue(SubjectKind.INSTRUCTOR, instructor.id, SESSION_TOKEN_TTL)
        return InstructorLoginResult(token=token, instructor_id=instructor.id)

    async def _current_user(self, db: AsyncSession, request: Request) -> User:
        user_id = authenticate_request(request, self.jwt_service, SubjectKind.USER)
        user = await self.users.find_by_id(db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def who_am_i(self, db: AsyncSession, request: Request) -> Profile:
        """Public profile of the user owning the request's session."""
        user = await self._current_user(db, request)
        return Profile(
            email=user.email,
            package=user.package,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role or "user",
            courses=list(user.courses or []),
        )

    async def refresh_location(self, db: AsyncSession, request: Request) -> Location:
        """Re-derive and store the session user's location, whatever it was before."""
        user = await self._current_user(db, request)
        location = self.geolocation.locate(request)
        _apply_location(user, location)
        await self.users.save(db, user)
        return location
