"""
FastAPI application for Logos.
"""
from __future__ import annotations

import asyncio
import datetime
import json
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from logos_api import __version__
from logos_api.analyzer import ArgumentAnalyzer
from logos_api.config import settings, logger
from logos_api.errors import (
    AnalysisError,
    ErrorKind,
    InvalidRequestError,
    RateLimitExceededError,
)
from logos_api.insights import build_scorecard, compute_similarity
from logos_api.models import (
    AnalyzeRequest,
    CompareRequest,
    CompareResponse,
    ComparisonSide,
    ErrorResponse,
    describe_validation_error,
)
from logos_api.provider_config import ProviderConfig, get_provider_config
from logos_api.rate_limiter import (
    UNKNOWN_CLIENT,
    FixedWindowRateLimiter,
    RateLimiter,
    RedisRateLimiter,
    create_redis_client,
)

RequestModel = TypeVar("RequestModel", bound=BaseModel)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred during analysis"


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_analyzer(request: Request) -> ArgumentAnalyzer:
    return request.app.state.analyzer


def get_client_ip(request: Request) -> str:
    if forwarded := request.headers.get("X-Forwarded-For"):
        return forwarded.split(",")[0].strip() or UNKNOWN_CLIENT
    if real_ip := request.headers.get("X-Real-IP"):
        return real_ip.strip() or UNKNOWN_CLIENT
    return request.client.host if request.client else UNKNOWN_CLIENT


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------


async def parse_body(request: Request, model: type[RequestModel]) -> RequestModel:
    """Decode and validate a JSON request body."""
    raw = await request.body()
    try:
        payload: Any = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidRequestError("Invalid JSON body") from exc

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidRequestError(f"Invalid request data: {describe_validation_error(exc)}") from exc


async def enforce_rate_limit(request: Request, limiter: RateLimiter) -> dict[str, str]:
    """Consume one request from the client's budget or raise RateLimitExceededError."""
    client_ip = get_client_ip(request)
    decision = await limiter.check_limit(client_ip)

    headers = {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
    }
    request.state.rate_limit_headers = headers

    if not decision.allowed:
        logger.warning("Rate limit exceeded for %s: limit %d", client_ip, decision.limit)
        raise RateLimitExceededError(
            limit=decision.limit,
            retry_after=decision.retry_after(limiter.now()),
            reset_time=decision.reset_at_iso,
        )
    return headers


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------


analysis_router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@analysis_router.post("/analyze", responses=_ERROR_RESPONSES)
async def analyze_argument(
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_rate_limiter),
    analyzer: ArgumentAnalyzer = Depends(get_analyzer),
):
    """
    Analyze an argument.

    Returns the claim, premises, emotion scores, fallacies, critical
    evaluation and counter-arguments produced by the selected model.
    """
    body = await parse_body(request, AnalyzeRequest)
    response.headers.update(await enforce_rate_limit(request, limiter))

    logger.info("Analyzing %d chars with %s", len(body.text), body.model)
    try:
        result = await analyzer.analyze(body.text, body.model, body.openRouterModel)
    except AnalysisError:
        raise
    except Exception as exc:
        logger.error("Analysis error: %s: %s", type(exc).__name__, str(exc)[:200])
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE) from exc

    return result.to_payload()


@analysis_router.post("/compare", response_model=CompareResponse, responses=_ERROR_RESPONSES)
async def compare_arguments(
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_rate_limiter),
    analyzer: ArgumentAnalyzer = Depends(get_analyzer),
):
    """
    Analyze two arguments with the same model and score them side by side.

    Charged as one request against the rate limit although it makes two
    upstream calls, so a client can spend up to twice the provider quota
    of ``/analyze`` within one window.
    """
    body = await parse_body(request, CompareRequest)
    response.headers.update(await enforce_rate_limit(request, limiter))

    outcomes = await asyncio.gather(
        analyzer.analyze(body.left, body.model, body.openRouterModel),
        analyzer.analyze(body.right, body.model, body.openRouterModel),
        return_exceptions=True,
    )
    for outcome in outcomes:
        if isinstance(outcome, AnalysisError):
            raise outcome
        if isinstance(outcome, BaseException):
            logger.error("Comparison error: %s: %s", type(outcome).__name__, str(outcome)[:200])
            raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE) from outcome

    left, right = outcomes
    return CompareResponse(
        left=ComparisonSide(text=body.left, result=left.to_payload(), scorecard=build_scorecard(left)),
        right=ComparisonSide(text=body.right, result=right.to_payload(), scorecard=build_scorecard(right)),
        similarity=compute_similarity(body.left, body.right),
    )


config_router = APIRouter()


@config_router.get("/config", response_model=ProviderConfig)
async def get_config(config: ProviderConfig = Depends(get_provider_config)):
    """Aggregator allow-list and provider defaults for clients."""
    return config


@config_router.get("/health")
async def health(analyzer: ArgumentAnalyzer = Depends(get_analyzer)):
    """Report which providers have a credential configured. Never returns the credentials."""
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "providers": {name: provider.is_available() for name, provider in analyzer.providers.items()},
    }


# ---------------------------------------------------------------------------
# FastAPI app assembly
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: rate limit store and provider connections."""
    logger.info("Logos v%s starting", __version__)
    for name, provider in app.state.analyzer.providers.items():
        if provider.is_available():
            logger.info("Provider %s ready", name)
        else:
            logger.warning("Provider %s not configured (%s missing)", name, provider.api_key_env)

    redis_limiter = None
    sweeper = None
    if settings.redis_enabled:
        redis_client = await create_redis_client(settings.REDIS_URL)
        app.state.rate_limiter = redis_limiter = RedisRateLimiter(
            redis_client,
            max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        )
        logger.info("Rate limiting: redis")
    else:
        limiter = app.state.rate_limiter
        if isinstance(limiter, FixedWindowRateLimiter):
            sweeper = asyncio.create_task(limiter.run_sweeper(settings.RATE_LIMIT_CLEANUP_SECONDS))
        logger.info("Rate limiting: in-memory")

    yield

    logger.info("Shutting down")
    if sweeper is not None:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
    await app.state.analyzer.close()
    if redis_limiter is not None:
        await redis_limiter.close()


app = FastAPI(
    title="Logos API",
    description="LLM-backed argument analysis: claim, premises, emotional tone, fallacies and counter-arguments",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.state.rate_limiter = FixedWindowRateLimiter(
    max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
)
app.state.analyzer = ArgumentAnalyzer()


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError):
    """Translate an error kind into its HTTP status."""
    headers = dict(getattr(request.state, "rate_limit_headers", {}))
    content: dict[str, Any] = {"message": exc.message}

    if isinstance(exc, RateLimitExceededError):
        headers.update(exc.headers())
        content["resetTime"] = exc.reset_time
    elif exc.kind == ErrorKind.CLIENT_INPUT:
        logger.warning("Client input rejected on %s: %s", request.url.path, exc.message)
    elif exc.kind == ErrorKind.MISSING_CREDENTIAL:
        logger.error("Provider %s has no credential configured", exc.provider)

    return JSONResponse(status_code=exc.http_status, content=content, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Never leak internals: log a short summary and return a generic message."""
    logger.error(
        "Unhandled exception on %s %s: %s: %s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc)[:200],
    )
    return JSONResponse(status_code=500, content={"message": UNEXPECTED_ERROR_MESSAGE})


async def security_headers_middleware(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


app.middleware("http")(security_headers_middleware)

cors_origins = settings.cors_origins
allow_credentials = "*" not in cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=[
        "X-RateLimit-Limit",
        "X-RateLimit-Remaining",
        "X-RateLimit-Reset",
        "Retry-After",
    ],
)


@app.get("/")
async def root():
    return {
        "name": "Logos API",
        "version": __version__,
        "status": "ok",
    }


app.include_router(analysis_router, prefix="/api", tags=["analysis"])
app.include_router(config_router, prefix="/api", tags=["config"])
