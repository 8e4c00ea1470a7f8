"""Session token extraction from a request.

Browsers send the session cookie; clients that cannot keep cookies (Safari
with cross-site tracking prevention, native apps) send the token as a
Bearer header instead. The cookie wins when both are present.
"""

from starlette.requests import HTTPConnection

from portal_auth.exceptions import TokenRejected, UnauthenticatedError
from portal_auth.services.jwt import JWTService, SubjectKind

USER_COOKIE_NAME = "token"
INSTRUCTOR_COOKIE_NAME = "instructor_token"

BEARER_PREFIX = "Bearer "


def extract_token(request: HTTPConnection, cookie_name: str = USER_COOKIE_NAME) -> str | None:
    """Return the raw token from the named cookie or the Authorization header, or None."""
    token = request.cookies.get(cookie_name)
    if token:
        return token

    header = request.headers.get("Authorization")
    if header:
        if header.startswith(BEARER_PREFIX):
            header = header[len(BEARER_PREFIX) :]
        if header:
            return header
    return None


def authenticate_request(
    request: HTTPConnection,
    jwt_service: JWTService,
    kind: SubjectKind = SubjectKind.USER,
    cookie_name: str = USER_COOKIE_NAME,
) -> str:
    """Return the subject id of the request's session token. Raises UnauthenticatedError."""
    token = extract_token(request, cookie_name)
    if not token:
        raise UnauthenticatedError("No token")
    try:
        return jwt_service.validate(token, kind)
    except TokenRejected:
        raise UnauthenticatedError("Invalid token") from None
