# src/pulse_claims/main.py
"""Main entry point for the Pulse Claims service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pulse_claims import __version__
from pulse_claims.api.v1 import claims_router, system_router
from pulse_claims.core.errors import ClaimError, RateLimited, UpstreamUnavailable, ValidationError
from pulse_claims.core.logging import configure_logging
from pulse_claims.core.settings import settings
from pulse_claims.services.context import ClaimsContext, build_claims_context

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.log_level, json_output=settings.log_json)
    if getattr(app.state, "claims_context", None) is None:
        # Fails fast when the signing key is missing.
        app.state.claims_context = build_claims_context(settings)
    try:
        yield
    finally:
        context: ClaimsContext | None = getattr(app.state, "claims_context", None)
        if context:
            await context.close()
            app.state.claims_context = None


# Initialize FastAPI app
app = FastAPI(
    title="Pulse Claims API",
    description="Daily reward claim authorization and settlement",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include API routers
app.include_router(claims_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.exception_handler(ClaimError)
async def claim_error_handler(request: Request, exc: ClaimError) -> JSONResponse:
    log_context = {"path": request.url.path, "kind": exc.kind, **exc.context}
    if isinstance(exc, UpstreamUnavailable):
        logger.error("%s: %s (cause: %r)", exc.kind, exc.message, exc.__cause__, extra=log_context)
    else:
        logger.info("%s: %s", exc.kind, exc.message, extra=log_context)

    headers = {"Retry-After": str(exc.retry_after)} if isinstance(exc, RateLimited) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
        message = f"Invalid {field or 'request'}: {first.get('msg', 'invalid value')}"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=ValidationError.status_code, content=ValidationError(message).to_payload())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "internal_error", "message": "Internal server error"},
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "description": "Daily reward claim authorization and settlement",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("pulse_claims.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
