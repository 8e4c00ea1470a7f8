"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-0123456789abcdef0123456789")
os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("EMAIL_MODE", "console")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from starlette.requests import Request  # noqa: E402

from portal_auth.database import Base, get_db  # noqa: E402
from portal_auth.models.instructor import Instructor  # noqa: E402
from portal_auth.models.user import User  # noqa: E402
from portal_auth.services.email import get_email_service  # noqa: E402
from portal_auth.services.geolocation import Location, get_geolocation_service  # noqa: E402
from portal_auth.services.password import hash_password  # noqa: E402


class RecordingMailer:
    """Stands in for EmailService; keeps every message instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False

    async def send_mail(self, to: str, subject: str, text: str, html: str) -> bool:
        if self.fail:
            return False
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})
        return True


class FixedLocator:
    """Stands in for GeolocationService; always reports the same place."""

    def __init__(self) -> None:
        self.location = Location(city="Austin", state="Texas", country="United States")
        self.calls = 0

    def locate(self, request) -> Location:
        self.calls += 1
        return self.location


@pytest.fixture(name="db_path")
def db_path_fixture(tmp_path):
    """Create a fresh SQLite database file with the schema applied."""
    path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(bind=engine)
    engine.dispose()
    return path


@pytest.fixture(name="db_session")
def db_session_fixture(db_path):
    """Synchronous session on the test database, for seeding and assertions."""
    engine = create_engine(f"sqlite:///{db_path}")
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture(name="session_factory")
def session_factory_fixture(db_path):
    """Async session factory on the test database, as the app uses it."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture(name="mailer")
def mailer_fixture():
    return RecordingMailer()


@pytest.fixture(name="locator")
def locator_fixture():
    return FixedLocator()


@pytest.fixture(name="client")
def client_fixture(session_factory, mailer: RecordingMailer, locator: FixedLocator):
    """Create a test client with the test database and fake collaborators."""
    from main import app

    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: mailer
    app.dependency_overrides[get_geolocation_service] = lambda: locator
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session) -> User:
    """A registered end-user with password 'secret1' and no known location."""
    user = User(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        password_hash=hash_password("secret1"),
        role="user",
        package="premium",
        courses=["carbon-101"],
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(name="test_instructor")
def test_instructor_fixture(db_session: Session) -> Instructor:
    """A registered instructor with password 'teach123'."""
    instructor = Instructor(
        first_name="Grace",
        last_name="Hopper",
        email="grace@example.com",
        password_hash=hash_password("teach123"),
    )
    db_session.add(instructor)
    db_session.commit()
    db_session.refresh(instructor)
    return instructor


@pytest.fixture(name="make_request")
def make_request_fixture():
    """Build a bare Starlette request from headers, cookies and a client address."""

    def _make(headers: dict | None = None, cookies: dict | None = None, client=("203.0.113.9", 50000)) -> Request:
        raw = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or {}).items()]
        if cookies:
            cookie_header = "; ".join(f"{k}={v}" for k, v in cookies.items())
            raw.append((b"cookie", cookie_header.encode("latin-1")))
        scope = {
            "type": "http",
            "method": "GET",
            "path": "/",
            "query_string": b"",
            "headers": raw,
            "client": client,
        }
        return Request(scope)

    return _make
