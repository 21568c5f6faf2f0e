"""FastAPI application for the referral intake service.

Provides:
- Referral submission with referrer find-or-create and counting
- Admin and referee notification emails
- Referral listing, lookup and status updates
- Referrer statistics

Flow:
1. POST /api/referrals - Validate, store referrer + referral, send emails
2. GET /api/referrals - List referrals, newest first
3. GET /api/referrals/{id} - Fetch one referral
4. PATCH /api/referrals/{id}/status - Update a referral's status
5. GET /api/referrers/{id}/stats - Referrer with its referrals
"""

import logging

# Load environment variables from project root
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from referral_shared.email import EmailSender
from referral_shared.schemas import HealthResponse

from referral_api.config import Settings
from referral_api.db.database import (
    create_engine,
    create_session_factory,
    init_db,
    ping_database,
)
from referral_api.errors import DependencyError, ReferralServiceError
from referral_api.referrals.intake import ReferralIntake
from referral_api.referrals.routes import router as referrals_router
from referral_api.referrers.routes import router as referrers_router

_project_root = os.path.dirname(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))
)
load_dotenv(os.path.join(_project_root, ".env.local"))
load_dotenv()  # Also try default .env

logger = logging.getLogger("referral-api")


# =============================================================================
# Error Handlers
# =============================================================================


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Turn FastAPI's validation errors into one readable message."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"Invalid request: {location}: {first.get('msg')}"
    return f"Invalid request: {first.get('msg')}"


async def referral_error_handler(
    request: Request, exc: ReferralServiceError
) -> JSONResponse:
    """Render a service error as ``{"error": message}``."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and path params are client errors (400, not 422)."""
    message = _describe_validation_error(exc)
    logger.info(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": message}
    )


async def database_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Store failures outside the intake: log detail, answer generically."""
    logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
    error = DependencyError()
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unhandled still answers with a JSON error body."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    error = DependencyError()
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    settings: Settings | None = None,
    email_sender: EmailSender | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings: Runtime settings. If not provided, loads from environment.
        email_sender: Email transport. If not provided, built from settings.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create shared clients at startup, release them at shutdown."""
        engine = create_engine(settings.database_url)

        try:
            if settings.auto_create_tables:
                await init_db(engine)
            await ping_database(engine)
            logger.info("Database connected successfully")
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database connection error: {e}")

        session_factory = create_session_factory(engine)
        sender = email_sender or EmailSender(settings.email)

        app.state.settings = settings
        app.state.engine = engine
        app.state.session_factory = session_factory
        app.state.intake = ReferralIntake(
            session_factory,
            sender,
            mode=settings.referral_mode,
            notification_failure_is_error=settings.notification_failure_is_error,
        )
        logger.info(f"Referral intake ready in {settings.referral_mode.value} mode")

        yield

        await engine.dispose()

    app = FastAPI(
        title="Referral Intake API",
        description="Referral submissions with referrer tracking and email notifications",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware for web frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ReferralServiceError, referral_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(referrals_router)
    app.include_router(referrers_router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint."""
        try:
            await ping_database(request.app.state.engine)
            database = "ok"
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Health check database error: {e}")
            database = "unavailable"

        return HealthResponse(
            status="healthy" if database == "ok" else "degraded",
            timestamp=datetime.now(timezone.utc).isoformat(),
            database=database,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    main_settings = Settings.from_env()
    logging.basicConfig(
        level=main_settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        create_app(main_settings), host=main_settings.host, port=main_settings.port
    )
