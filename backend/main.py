"""Fintrack - internal finance tracker API."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fintrack.api.v1 import (
    accounts,
    admin,
    auth,
    categories,
    clients,
    dashboard,
    exchange_rate,
    goals,
    invoices,
    transactions,
)
from fintrack.core.config import settings as app_settings
from fintrack.core.database import async_session_maker, init_db
from fintrack.core.errors import FintrackError
from fintrack.services.seed import seed_defaults

# Initialize Sentry
import sentry_sdk
if app_settings.sentry_dsn:
    sentry_sdk.init(
        dsn=app_settings.sentry_dsn,
        traces_sample_rate=1.0,
        profiles_sample_rate=1.0,
    )

logger = logging.getLogger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    logger.info("🚀 Starting Fintrack...")

    # Initialize database
    await init_db()
    logger.info("✅ Database initialized")

    if app_settings.seed_demo_data:
        async with async_session_maker() as session:
            if await seed_defaults(session):
                logger.info("✅ Default categories and accounts seeded")

    yield

    # Shutdown
    logger.info("👋 Shutting down Fintrack...")


# Create FastAPI app
app = FastAPI(
    title=app_settings.app_name,
    description="Internal finance tracker - accounts, approvals, invoices",
    version="1.0.0",
    lifespan=lifespan
)


# Exception Handlers

@app.exception_handler(FintrackError)
async def fintrack_error_handler(request: Request, exc: FintrackError):
    """Domain errors carry their own status code."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report only the first failing field."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global handler to catch all unhandled exceptions."""
    logger.exception(f"Global Exception: {exc}")
    return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api")
app.include_router(categories.router, prefix="/api")
app.include_router(accounts.router, prefix="/api")
app.include_router(transactions.router, prefix="/api")
app.include_router(clients.router, prefix="/api")
app.include_router(invoices.router, prefix="/api")
app.include_router(goals.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")  # Dashboard stats and reports
app.include_router(admin.router, prefix="/api")  # User and role management
app.include_router(exchange_rate.router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "name": app_settings.app_name,
        "version": "1.0.0",
        "status": "running",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
