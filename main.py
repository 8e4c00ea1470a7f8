"""Portal Auth - credential and session layer."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from portal_auth.config import get_settings
from portal_auth.routers import auth_router
from portal_auth.services.geolocation import close_geolocation_service
from portal_auth.services.jwt import get_jwt_service

# Logging
logger = logging.getLogger("portal_auth")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the token service up front so a missing production secret stops startup.

    The GeoLite2 reader is released on shutdown.
    """
    for warning in get_settings().validate():
        logger.warning(warning)
    get_jwt_service()
    yield
    close_geolocation_service()


app = FastAPI(title="Portal Auth", version=VERSION, lifespan=lifespan)


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    MAX_BODY_SIZE = 1024 * 1024  # 1MB, far above any auth payload

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.MAX_BODY_SIZE:
            return JSONResponse(status_code=413, content={"message": "Request body too large"})
        return await call_next(request)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)

# API routers
app.include_router(auth_router)


# --- Malformed body handler ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Bodies that are not JSON objects or carry wrongly typed fields are a plain 400."""
    logger.info("Rejected malformed body on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=400, content={"message": "Invalid request body."})


# --- Health check ---
@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "app": "portal-auth", "version": VERSION}
