import logging

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from apps.dashboard.router import router as dashboard_router
from apps.pos.router import router as pos_router
from apps.procurement_requests.router import router as procurement_requests_router
from apps.users.router import router as users_router
from common.errors import ProcurementError, UnexpectedError, ValidationError
from common.responses import error_from_exception, error_response
from constants.roles import ADMIN
from models.audit_log import AuditLog  # noqa: F401  (registers table metadata)
from models.base import Base, engine, SessionLocal
from models.organization import Organization
from models.user import User
from settings.config import get_settings
from utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _default_limit(requests: int, window: int) -> str:
    # Build a default limit string from settings, using common time units
    units = {1: "second", 60: "minute", 3600: "hour", 86400: "day"}
    if window in units:
        return f"{requests}/{units[window]}"
    return f"{requests} per {window} seconds"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the error taxonomy onto HTTP: {success: false, error, message} with the kind's status code.
    """

    @app.exception_handler(ProcurementError)
    async def procurement_error_handler(request: Request, exc: ProcurementError):
        return JSONResponse(status_code=exc.status_code, content=error_from_exception(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg")} for err in exc.errors()
        ]
        return JSONResponse(
            status_code=ValidationError.status_code,
            content=error_response(ValidationError.error, "Request payload is invalid", details),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=UnexpectedError.status_code,
            content=error_response(UnexpectedError.error, "A database error occurred"),
        )


async def bootstrap_defaults() -> None:
    """
    Create tables and seed a default organization with one admin (local/dev only).
    In prod, use Alembic migrations and provision tenants out of band.
    """
    settings = get_settings()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        user_res = await db.execute(select(User).where(User.email == settings.ADMIN_EMAIL))
        if user_res.scalar_one_or_none():
            return

        org = Organization(name=settings.BOOTSTRAP_ORG_NAME)
        db.add(org)
        await db.flush()
        db.add(User(org_id=org.id, email=settings.ADMIN_EMAIL, full_name=settings.ADMIN_NAME, role=ADMIN))
        await db.commit()
        logger.info("Seeded organization %r with admin %s", org.name, settings.ADMIN_EMAIL)


def create_app() -> FastAPI:
    """
    Application factory to build a FastAPI app with all middlewares and routers.
    """
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, sql_echo=settings.SQL_ECHO)

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version="1.0.0",
    )

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["Authorization", "Content-Type"],
        expose_headers=["Authorization"],
    )

    # Security headers middleware (helmet-like)
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains; preload"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"
        return response

    if settings.ENABLE_RATE_LIMITER:
        limiter = Limiter(
            key_func=get_remote_address,
            default_limits=[_default_limit(settings.RATE_LIMIT_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS)],
            storage_uri=settings.RATE_LIMIT_STORAGE_URI or None,
        )
        app.state.limiter = limiter
        app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
        app.add_middleware(SlowAPIMiddleware)

    register_exception_handlers(app)

    # Routers
    app.include_router(procurement_requests_router)
    app.include_router(pos_router)
    app.include_router(dashboard_router)
    app.include_router(users_router)

    @app.on_event("startup")
    async def on_startup():
        if settings.AUTO_CREATE_TABLES:
            await bootstrap_defaults()

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
