"""
FastAPI application for codementor.
"""
from __future__ import annotations

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse

from codementor import __version__
from codementor.analyzer import CodeReviewer
from codementor.classifier import classify
from codementor.curves import classify_curve, curve_points, svg_path
from codementor.dashboard import build_dashboard, download_name
from codementor.history import (
    HistoryStore,
    HistoryStoreError,
    MemoryHistoryStore,
    RedisHistoryStore,
)
from codementor.markdown import render_markdown
from codementor.report_parser import parse_report

from .config import logger, settings
from .schemas import (
    OWNER_PATTERN,
    CurveResponse,
    DownloadRequest,
    ErrorResponse,
    HistoryResponse,
    ParseRequest,
    ParseResponse,
    ReviewRequest,
    ReviewResponse,
)


# ---------------------------------------------------------------------------
# History store lifecycle
# ---------------------------------------------------------------------------


async def create_history_store() -> HistoryStore:
    """Redis store when REDIS_URL is set, otherwise an in-process store."""
    if not settings.redis_enabled:
        logger.info("REDIS_URL not set, keeping review history in memory")
        return MemoryHistoryStore(max_records=settings.HISTORY_MAX_RECORDS)

    store = RedisHistoryStore.from_url(
        settings.REDIS_URL,
        timeout_seconds=settings.REDIS_TIMEOUT_SECONDS,
        max_records=settings.HISTORY_MAX_RECORDS,
    )
    if await store.ping():
        logger.info("Redis history store ready")
        return store

    await store.close()
    if settings.DEBUG:
        logger.warning("Redis unreachable, falling back to in-memory history (DEBUG mode)")
        return MemoryHistoryStore(max_records=settings.HISTORY_MAX_RECORDS)
    raise RuntimeError("Redis history store unreachable")


def get_history_store(request: Request) -> HistoryStore:
    store = getattr(request.app.state, "history", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Review history unavailable")
    return store


def validate_owner(owner: str) -> str:
    if not OWNER_PATTERN.match(owner):
        raise HTTPException(status_code=400, detail="Invalid owner")
    return owner


# ---------------------------------------------------------------------------
# Security middleware
# ---------------------------------------------------------------------------


async def security_headers_middleware(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------


review_router = APIRouter()


@review_router.post(
    "/review/stream",
    responses={422: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def review_stream(payload: ReviewRequest, request: Request):
    """
    Stream a review as markdown fragments.

    The metrics block is the last fragment. When ``owner`` is set the review
    is stored after the final fragment was sent.
    """
    store = get_history_store(request) if payload.owner else None
    reviewer = CodeReviewer(payload.to_options(), store=store)
    logger.info("Streaming %s review - Code length: %d chars", reviewer.profile.name, len(payload.code))

    async def body():
        try:
            async for fragment in reviewer.fragments(payload.code, owner=payload.owner):
                yield fragment
        except HistoryStoreError as exc:
            logger.error("Review streamed but not stored for %s: %s", exc.owner, exc)

    return StreamingResponse(
        body(),
        media_type="text/markdown; charset=utf-8",
        headers={"Cache-Control": "no-cache", "X-Review-Profile": reviewer.profile.name},
    )


@review_router.post(
    "/review",
    response_model=ReviewResponse,
    responses={422: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def review_code(payload: ReviewRequest, request: Request):
    """Run a complete review and return the text, parsed report and dashboard."""
    store = get_history_store(request) if payload.owner else None
    reviewer = CodeReviewer(payload.to_options(), store=store)
    start_time = time.time()

    outcome = await reviewer.review(payload.code, owner=payload.owner)

    language = reviewer.options.languageOverride or classify(payload.code)
    dashboard = build_dashboard(outcome.report, language)
    logger.info(
        "Review completed in %.3fs - score %s",
        time.time() - start_time,
        dashboard.score if dashboard else "n/a",
    )
    return ReviewResponse(
        buffer=outcome.buffer,
        report=outcome.report,
        dashboard=dashboard,
        record=outcome.record,
    )


@review_router.post("/review/download", responses={404: {"model": ErrorResponse}})
async def download_optimized(payload: DownloadRequest):
    """Return the last closed code block of a review as a file."""
    report = parse_report(payload.buffer)
    if report.optimizedCode is None:
        raise HTTPException(status_code=404, detail="No optimized code found")

    language = payload.resolve_language(report.codeBlocks[-1].languageTag)
    filename = download_name(language)
    return PlainTextResponse(
        report.optimizedCode,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


report_router = APIRouter()


@report_router.post("/report/parse", response_model=ParseResponse)
async def parse_buffer(payload: ParseRequest):
    """Parse a (possibly partial) review buffer."""
    report = parse_report(payload.buffer)
    return ParseResponse(report=report, nodes=render_markdown(report.cleanMarkdown))


@report_router.get("/curves", response_model=CurveResponse)
async def curves(label: str = Query(..., min_length=1, max_length=32)):
    """Plot points for a complexity label on a 100x100 grid."""
    return CurveResponse(
        label=label,
        shape=classify_curve(label).value,
        points=curve_points(label),
        path=svg_path(label),
    )


history_router = APIRouter()


@history_router.get("/history/{owner}", response_model=HistoryResponse)
async def list_history(owner: str, request: Request):
    """Reviews of one owner, most recent first."""
    owner = validate_owner(owner)
    records = await get_history_store(request).list(owner)
    return HistoryResponse(owner=owner, records=records)


@history_router.delete("/history/{owner}")
async def clear_history(owner: str, request: Request):
    owner = validate_owner(owner)
    await get_history_store(request).clear(owner)
    logger.info("Cleared review history for %s", owner)
    return {"success": True, "owner": owner}


health_router = APIRouter()


@health_router.get("/health")
async def health(request: Request):
    """Health check, including the Redis history backend when configured."""
    status = "ok"
    issues = []

    store = getattr(request.app.state, "history", None)
    if store is None:
        status = "degraded"
        issues.append("history_unavailable")
    elif isinstance(store, RedisHistoryStore) and not await store.ping():
        status = "degraded"
        issues.append("redis_unreachable")

    response = {
        "status": status,
        "version": __version__,
        "profile": settings.REVIEW_PROFILE,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if issues:
        response["issues"] = issues
    return response


# ---------------------------------------------------------------------------
# FastAPI app assembly
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info("codementor v%s starting", __version__)
    logger.info("Default profile: %s", settings.REVIEW_PROFILE)

    app.state.history = await create_history_store()

    yield

    logger.info("Shutting down")
    try:
        await app.state.history.close()
    except HistoryStoreError as exc:
        logger.error("Error closing history store: %s", exc)
    app.state.history = None


app = FastAPI(
    title="codementor API",
    description="Streaming heuristic code review",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)


@app.exception_handler(HistoryStoreError)
async def history_exception_handler(request: Request, exc: HistoryStoreError):
    logger.error("History store error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=503,
        content={"success": False, "error": "Review history unavailable", "code": "history_unavailable"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors without echoing submitted code."""
    error_details = [
        {"field": err.get("loc", [])[-1] if err.get("loc") else "unknown", "type": err.get("type")}
        for err in exc.errors()[:5]
    ]
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, error_details)
    return JSONResponse(status_code=422, content={"success": False, "error": "Invalid request format"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s: %s: %s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc)[:200],
    )
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


app.middleware("http")(security_headers_middleware)

cors_origins = settings.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials="*" not in cors_origins,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Review-Profile"],
)


@app.get("/")
async def root():
    return {
        "name": "codementor API",
        "version": __version__,
        "endpoints": {
            "/api/v1/review/stream": "POST - Stream a review as markdown",
            "/api/v1/review": "POST - Complete review with parsed report",
            "/api/v1/report/parse": "POST - Parse a partial review buffer",
            "/api/v1/history/{owner}": "GET/DELETE - Review history",
        },
    }


app.include_router(health_router, tags=["health"])
app.include_router(review_router, prefix="/api/v1", tags=["review"])
app.include_router(report_router, prefix="/api/v1", tags=["report"])
app.include_router(history_router, prefix="/api/v1", tags=["history"])
