"""
HTTP API for the domain finder.

Endpoints:
- POST /check   {"domains": [...]} -> {"results": [...], "cached_bootstrap": bool}
- GET  /health  liveness probe
- GET  /        service description

Requests to /check are rate limited per client IP. Internal faults are
logged and answered with a generic message.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.concurrency import run_in_threadpool

from . import __version__
from .audit_logger import AuditLogger
from .checker import DomainChecker
from .config import SystemConfig, apply_env_overrides, create_default_config
from .exceptions import ValidationError
from .kv_store import create_store
from .rate_limiter import RateLimiter


COMPONENT = "API"

INVALID_REQUEST_MESSAGE = 'Missing or invalid "domains" array'


def client_identity(request: Request, trust_proxy_headers: bool = False) -> str:
    """
    Client IP used as the rate limit identity.

    Proxy headers are read only when trust_proxy_headers is set; otherwise
    the socket peer address is used.
    """
    if not trust_proxy_headers:
        return request.client.host if request.client is not None else "unknown"

    for header in ("cf-connecting-ip", "x-real-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


def create_app(
    config: Optional[SystemConfig] = None,
    checker: Optional[DomainChecker] = None,
    rate_limiter: Optional[RateLimiter] = None,
    logger: Optional[AuditLogger] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    The checker and rate limiter share one key-value store unless they are
    passed in explicitly.
    """
    config = config or apply_env_overrides(create_default_config())
    logger = logger or AuditLogger.from_config(config.logging)
    if checker is None:
        checker = DomainChecker(config=config, store=create_store(config.store), logger=logger)
    rate_limiter = rate_limiter or RateLimiter(
        store=checker.store,
        rule=config.rate_limit,
        logger=logger,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await checker.close()

    app = FastAPI(
        title="Domain Finder API",
        description="Domain availability checks via RDAP, DNS and WHOIS fallbacks",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.state.checker = checker
    app.state.rate_limiter = rate_limiter

    @app.get("/")
    async def index() -> dict:
        return {
            "name": "Domain Finder API",
            "version": __version__,
            "endpoints": {
                "POST /check": "Check domain availability (RDAP -> DNS -> WHOIS fallback)",
                "GET /health": "Health check",
            },
        }

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post("/check")
    async def check(request: Request) -> JSONResponse:
        identity = client_identity(request, config.trust_proxy_headers)
        status = await run_in_threadpool(rate_limiter.check, identity)
        if not status.allowed:
            return JSONResponse(
                {"error": "Rate limit exceeded"},
                status_code=429,
                headers={"Retry-After": str(int(status.retry_after_seconds) + 1)},
            )

        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": INVALID_REQUEST_MESSAGE}, status_code=400)

        domains = body.get("domains") if isinstance(body, dict) else None
        if not isinstance(domains, list):
            return JSONResponse({"error": INVALID_REQUEST_MESSAGE}, status_code=400)

        try:
            batch = await checker.check_domains(domains)
        except ValidationError as e:
            return JSONResponse({"error": e.message}, status_code=400)
        except Exception as e:
            logger.log_error(
                COMPONENT,
                "Unexpected error while checking domains",
                error=e,
                request_url=str(request.url),
            )
            return JSONResponse({"error": "Internal server error"}, status_code=500)

        return JSONResponse(
            batch.to_dict(),
            headers={"X-RateLimit-Remaining": str(status.remaining)},
        )

    return app
