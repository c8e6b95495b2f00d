"""FastAPI application and route handlers."""

import json
import sys
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from .auth import AuthGateway
from .config import settings
from .exceptions import AuthError, GrammarAPIError
from .grammar import GrammarProxy
from .middleware import add_request_id, catch_unhandled_errors, get_auth_gateway, get_current_user
from .models import (
    AuthResponse,
    Credentials,
    ErrorResponse,
    GrammarCheckRequest,
    GrammarCheckResponse,
    MessageResponse,
)
from .providers import create_llm_provider
from .storage import create_repository
from .tokens import TokenCodec


def configure_logging() -> None:
    """Configure logging - should be called at startup, not import time."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=settings.log_level,
        serialize=False,
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            level=settings.log_level,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    configure_logging()

    llm_provider = create_llm_provider(settings)
    repository = create_repository(settings.database_url)

    try:
        await repository.startup()
    except Exception as e:
        logger.error(f"Credential store startup failed: {e}")
        raise

    app.state.auth_gateway = AuthGateway(
        repository=repository,
        token_codec=TokenCodec.from_settings(settings),
        hash_rounds=settings.password_hash_rounds,
    )
    app.state.grammar_proxy = GrammarProxy(llm_provider=llm_provider)

    logger.info("Application started successfully")

    yield

    await repository.shutdown()
    app.state.auth_gateway = None
    app.state.grammar_proxy = None
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Grammar Checker API",
    version="1.0.0",
    description="User accounts and LLM-backed grammar and spelling checks",
    lifespan=lifespan,
)

app.middleware("http")(catch_unhandled_errors)
app.middleware("http")(add_request_id)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle validation errors with clean messages."""
    error_messages = []

    for error in exc.errors():
        field = error["loc"][-1] if error["loc"] else "field"
        message = error.get("msg", f"Invalid {field}")

        match error["type"]:
            case "missing":
                message = f"Required field '{field}' is missing"
            case "json_invalid":
                message = "Invalid JSON format"

        error_messages.append(message)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(message="; ".join(error_messages)).model_dump(),
    )


@app.exception_handler(GrammarAPIError)
async def grammar_api_exception_handler(request: Request, exc: GrammarAPIError) -> JSONResponse:
    """Handle domain-specific errors."""
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc}")
    else:
        logger.warning(f"{exc.__class__.__name__}: {exc}")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=exc.message).model_dump(),
        headers=headers,
    )


def get_grammar_proxy(request: Request) -> GrammarProxy:
    """Get the grammar proxy from app state."""
    proxy: GrammarProxy | None = getattr(request.app.state, "grammar_proxy", None)
    if proxy is None:
        raise RuntimeError("Service not initialized")
    return proxy


@app.get("/", tags=["health"])
async def root_endpoint() -> dict[str, str]:
    """Liveness message."""
    return {"message": "Grammar Checker API is running!"}


@app.post("/api/auth/signup", tags=["auth"])
async def signup_endpoint(
    gateway: Annotated[AuthGateway, Depends(get_auth_gateway)],
    credentials: Credentials | None = None,
) -> AuthResponse:
    """Create an account and return a bearer token."""
    credentials = credentials or Credentials()
    result = await gateway.signup(credentials.username, credentials.password)
    return AuthResponse(message="Signup successful", **result)


@app.post("/api/auth/login", tags=["auth"])
async def login_endpoint(
    gateway: Annotated[AuthGateway, Depends(get_auth_gateway)],
    credentials: Credentials | None = None,
) -> AuthResponse:
    """Exchange a username and password for a bearer token."""
    credentials = credentials or Credentials()
    result = await gateway.login(credentials.username, credentials.password)
    return AuthResponse(message="Login successful", **result)


@app.post("/api/auth/logout", tags=["auth"])
async def logout_endpoint(
    gateway: Annotated[AuthGateway, Depends(get_auth_gateway)],
) -> MessageResponse:
    """Acknowledge a logout. The token itself stays valid until it expires."""
    gateway.logout()
    return MessageResponse(message="Logged out successfully")


async def read_grammar_request(request: Request) -> GrammarCheckRequest:
    """Parse the grammar check body.

    Read inside the route rather than declared as a body parameter, so that the
    bearer token is checked before any body error is reported.
    """
    body = await request.body()
    if not body:
        return GrammarCheckRequest()

    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": {}}]
        ) from e

    try:
        return GrammarCheckRequest.model_validate(data if data is not None else {})
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors()) from e


@app.post(
    "/api/grammar/check",
    tags=["grammar"],
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": GrammarCheckRequest.model_json_schema()}}
        }
    },
)
async def grammar_check_endpoint(
    request: Request,
    username: Annotated[str, Depends(get_current_user)],
    proxy: Annotated[GrammarProxy, Depends(get_grammar_proxy)],
) -> GrammarCheckResponse:
    """Check text for grammar and spelling mistakes."""
    payload = await read_grammar_request(request)
    result = await proxy.check_grammar(username, payload.text)
    return GrammarCheckResponse(**result.model_dump())


app.openapi_tags = [
    {"name": "auth", "description": "Signup, login and logout"},
    {"name": "grammar", "description": "Grammar and spelling checks"},
    {"name": "health", "description": "Health checks"},
]
