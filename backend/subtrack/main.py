"""
SubTrack - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Registers the error envelopes and all API route handlers
5. Serves uploaded reports and the health check endpoint

The application follows a modular architecture:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: Business logic (identity, lifecycle, queries, storage)
- guard.py: Bearer token and role enforcement
- errors.py: Error taxonomy and JSON envelopes
- logging_config.py: Structured logging configuration
- database.py: Database connection management
"""

import time
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from subtrack.config import get_settings
from subtrack.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from subtrack.errors import register_exception_handlers
from subtrack.routes import auth, submissions, admin, faculty
from subtrack.database import DATABASE_URL, create_tables

# Import all models so they are registered with Base.metadata
from subtrack.models import User, Submission, Review  # noqa: F401

settings = get_settings()

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging(settings.log_level)
logger = get_logger("http")

# Auto-create tables for SQLite local development
if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite - creating tables directly")
    create_tables()

upload_dir = Path(settings.upload_dir)
upload_dir.mkdir(parents=True, exist_ok=True)

app = FastAPI(
    title="SubTrack",
    description=(
        "Academic submission tracking: students upload PDF reports, admins assign "
        "faculty reviewers, and faculty approve or request resubmission with marks."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# ──────────────────────────────────────────────────────────────
# CORS Middleware
# ──────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


# ──────────────────────────────────────────────────────────────
# Request ID Middleware
#
# Generates a UUID per incoming request, stores it in a context variable
# for every log entry, returns it as X-Request-ID and logs latency.
# ──────────────────────────────────────────────────────────────
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = generate_request_id()
    request_id_var.set(req_id)
    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "query_params": dict(request.query_params)
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


register_exception_handlers(app)

# ──────────────────────────────────────────────────────────────
# Register API routes
# ──────────────────────────────────────────────────────────────
app.include_router(auth.router, tags=["Auth"])
app.include_router(submissions.router, tags=["Submissions"])
app.include_router(admin.router, tags=["Admin"])
app.include_router(faculty.router, tags=["Faculty"])

app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for Docker health checks and monitoring."""
    return {"ok": True, "service": "subtrack-backend", "version": "1.0.0"}


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "service": "SubTrack",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "register": "POST /auth/register",
            "login": "POST /auth/login",
            "me": "GET /auth/me",
            "upload": "POST /submissions/upload",
            "mine": "GET /submissions/mine",
            "submission_detail": "GET /submissions/{id}",
            "admin_users": "GET /admin/users",
            "admin_submissions": "GET /admin/submissions",
            "admin_faculty": "GET /admin/faculty",
            "assign": "POST /admin/assign",
            "admin_stats": "GET /admin/stats",
            "faculty_assigned": "GET /faculty/assigned",
            "faculty_reviews": "GET /faculty/reviews",
            "review": "POST /faculty/review",
            "faculty_stats": "GET /faculty/stats"
        }
    }
