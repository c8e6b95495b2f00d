"""Request tracking middleware and bearer-token authentication."""

import uuid

from fastapi import Header, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from .auth import AuthGateway
from .models import ErrorResponse


async def add_request_id(request: Request, call_next):
    """Add request ID to context for tracking.

    Args:
        request: Incoming FastAPI request.
        call_next: Next middleware or handler in chain.

    Returns:
        Response with X-Request-ID header.

    """
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id

    with logger.contextualize(request_id=request_id):
        logger.debug(
            "Request started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        logger.debug(
            "Request completed",
            status_code=response.status_code,
        )

        return response


async def catch_unhandled_errors(request: Request, call_next):
    """Turn any exception that escaped the route into a generic 500 body."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(message="Internal server error").model_dump(),
        )


def get_auth_gateway(request: Request) -> AuthGateway:
    """Get the auth gateway from app state."""
    gateway: AuthGateway | None = getattr(request.app.state, "auth_gateway", None)
    if gateway is None:
        raise RuntimeError("Service not initialized")
    return gateway


async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> str:
    """Extract and validate the username from the bearer token.

    Args:
        request: Incoming request, used to reach the auth gateway.
        authorization: Authorization header value (Bearer token).

    Returns:
        Username extracted from a valid token.

    Raises:
        AuthError: If the token is missing, invalid or expired.
    """
    return get_auth_gateway(request).authenticate(authorization)
