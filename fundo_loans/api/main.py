"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fundo_loans.api.dependencies import get_request_id
from fundo_loans.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fundo_loans.api.v1 import loans
from fundo_loans.domain.exceptions import (
    BalanceExceededError,
    ConcurrencyConflictError,
    DomainException,
    InvariantViolationError,
    NotFoundError,
    ValidationError,
)
from fundo_loans.infrastructure.database.seed import seed_demo_loans
from fundo_loans.infrastructure.database.session import SessionLocal, init_db
from fundo_loans.infrastructure.observability.logging import log_request_failure, setup_logging
from fundo_loans.config import settings

# Setup structured logging
setup_logging(settings.log_level)

# Most specific first; anything unlisted is treated as a server error
ERROR_STATUS_CODES = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (BalanceExceededError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConcurrencyConflictError, status.HTTP_409_CONFLICT),
)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred."


def status_code_for(error: DomainException) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Translate domain errors into the {message} envelope"""
    status_code = status_code_for(exc)
    log_request_failure(get_request_id(request), request.url.path, status_code, exc)

    # InvariantViolationError and other unexpected domain failures stay opaque to clients
    message = INTERNAL_ERROR_MESSAGE if status_code >= 500 else str(exc)
    return JSONResponse(status_code=status_code, content={"message": message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request shape errors are reported as 400 with a readable message"""
    details = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{field}: {error['msg']}" if field else error["msg"])

    message = "; ".join(details) or "Invalid request."
    log_request_failure(get_request_id(request), request.url.path, status.HTTP_400_BAD_REQUEST, exc)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create schema and seed demo data on startup"""
    if settings.create_schema_on_startup:
        init_db()
    if settings.seed_demo_data:
        db = SessionLocal()
        try:
            seed_demo_loans(db)
        finally:
            db.close()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Fundo Loan Management API",
        description="Create loans, list them and apply payments against their balance",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(loans.router, prefix="/api", tags=["loans"])

    return app


app = create_app()
