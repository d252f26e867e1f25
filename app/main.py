"""
app/main.py — Portfolio API (FastAPI) v1.0
==========================================
REST API over the portfolio SQLite store. Reads are public; writes need
``Authorization: Bearer <token>`` matching the configured secret.

Routes:
  GET  /                         → front page (profile, top skills, projects)
  GET  /health                   → liveness check
  GET  /api/profile              → profile + education + work history
  GET  /api/skills               → all skills
  GET  /api/skills/top           → skills ranked by project count
  GET  /api/skills/{id}          → single skill
  GET  /api/projects             → projects with skill names (?skill= filter)
  GET  /api/projects/{id}        → single project
  GET  /api/search?q=            → project search (title / description)
  PUT  /api/profile              → update profile                (token)
  POST|PUT|DELETE /api/skills    → manage skills                 (token)
  POST|PUT|DELETE /api/education → manage education              (token)
  POST|PUT|DELETE /api/work      → manage work experience        (token)
  POST|PUT|DELETE /api/projects  → manage projects               (token)

Run:
  python -m app.main
  uvicorn app.main:create_app --factory
"""

import asyncio
import hashlib
import logging
import sqlite3
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.dependencies.access_control import AuthError, BearerGate, _extract_raw_token
from app.dependencies.database import get_conn
from app.routers import manage, public
from config_loader import load_config, resolve_db_path
from db import models
from db.errors import PortfolioError
from db.seed import bootstrap

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

# Validation error types that mean "the field was not (meaningfully) given".
MISSING_TYPES = {"missing", "string_too_short"}


# ─────────────────────────────────────────────────────────────────────────────
# SHARED HELPERS
# ─────────────────────────────────────────────────────────────────────────────

def err(msg: str, code: int = 400, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content={"status": "error", "error": {"code": code, "message": msg}},
        headers=headers,
    )


def _rate_limit_key(request: Request) -> str:
    """Use token hash as rate limit key for authenticated requests, IP otherwise."""
    token = _extract_raw_token(request)
    if token:
        return f"token:{hashlib.sha256(token.encode()).hexdigest()[:16]}"
    return get_remote_address(request)


def _field_names(errors: list[dict]) -> list[str]:
    """'body.name' style locations → ['name'], keeping first-seen order."""
    names: list[str] = []
    for error in errors:
        parts = [str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path")]
        name = ".".join(parts) or str(error.get("loc", ("body",))[0])
        if name not in names:
            names.append(name)
    return names


# ─────────────────────────────────────────────────────────────────────────────
# ERROR MAPPING
# ─────────────────────────────────────────────────────────────────────────────

async def portfolio_error_handler(request: Request, exc: PortfolioError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return err("Internal server error", exc.status_code)
    headers = exc.headers if isinstance(exc, AuthError) else None
    return err(exc.message, exc.status_code, headers)


async def sqlite_error_handler(request: Request, exc: sqlite3.Error):
    logger.error("Store error on %s %s", request.method, request.url.path, exc_info=exc)
    return err("Internal server error", 500)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if all(e.get("type") in MISSING_TYPES for e in errors):
        msg = f"Missing required field(s): {', '.join(_field_names(errors))}"
    else:
        msg = f"Invalid field(s): {', '.join(_field_names(errors))}"
    return err(msg, 400)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return err(str(exc.detail), exc.status_code, getattr(exc, "headers", None))


# ─────────────────────────────────────────────────────────────────────────────
# APP FACTORY
# ─────────────────────────────────────────────────────────────────────────────

def create_app(config: Optional[dict] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Merged configuration (see config_loader.load_config). Loaded
                from the project root when omitted. Read once, here: the
                database path goes to app.state, the API token to the gate.
    """
    config = load_config() if config is None else config
    db_cfg = config.get("database", {})
    security_cfg = config.get("security", {})
    rate_cfg = config.get("rate_limit", {})

    db_path = resolve_db_path(config)
    gate = BearerGate(security_cfg.get("api_token"))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        bootstrap(db_path, seed=db_cfg.get("seed", True))
        yield

    app = FastAPI(
        title="Portfolio API",
        description="Profile, education, work history, skills and projects.",
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url=None,
    )
    app.state.db_path = db_path

    # One limiter (and storage) per app instance
    limiter = Limiter(
        key_func=_rate_limit_key,
        default_limits=[rate_cfg.get("default", "120/minute")],
        enabled=rate_cfg.get("enabled", True),
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        ProxyHeadersMiddleware,
        trusted_hosts=security_cfg.get("trusted_proxies", ["127.0.0.1", "::1"]),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=security_cfg.get("cors_origins", []),
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.add_exception_handler(PortfolioError, portfolio_error_handler)
    app.add_exception_handler(sqlite3.Error, sqlite_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(public.router, prefix="/api")
    app.include_router(manage.router, prefix="/api", dependencies=[Depends(gate)])

    @app.get("/health")
    async def health():
        return {"status": "ok", "ts": time.time(), "version": APP_VERSION}

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def index(request: Request, conn=Depends(get_conn)):
        """Front page: server-rendered profile, client-side project filter."""
        profile = await asyncio.to_thread(models.get_profile_aggregate, conn)
        skills = await asyncio.to_thread(models.top_skills, conn)
        projects = await asyncio.to_thread(models.list_projects, conn)
        return templates.TemplateResponse(
            request,
            "index.html",
            {"profile": profile, "top_skills": skills, "projects": projects},
        )

    logger.info("Portfolio API initialized (db=%s, writes=%s)",
                db_path, "enabled" if gate.enabled else "disabled")
    return app


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    config = load_config()
    server_cfg = config.get("server", {})
    uvicorn.run(
        create_app(config),
        host=server_cfg.get("host", "0.0.0.0"),
        port=server_cfg.get("port", 3000),
        log_level="info",
    )
