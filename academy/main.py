import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

# Import models so they're registered with SQLAlchemy Base
from . import models  # noqa: F401
from .database import Base, engine
from .domain.enrolment import router as enrolment_router
from .exceptions import (
    ConfigurationError,
    error_response,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .routes.accounts import router as accounts_router
from .routes.address_search import router as address_search_router
from .routes.communications import router as communications_router
from .routes.courses import router as courses_router
from .routes.portal import router as portal_router
from .routes.staff import router as staff_router
from .security_headers import SecurityHeadersMiddleware
from .supabase_auth import SupabaseAuthError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Vigyanit Academy API", version="1.0.0", lifespan=lifespan)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.exception_handler(SupabaseAuthError)
async def supabase_auth_exception_handler(request: Request, exc: SupabaseAuthError):
    logger.error(f"{request.method} {request.url.path} - Auth service error: {exc.message}")
    status_code = 400 if exc.status_code in (400, 422) else 500
    return error_response(status_code, exc.message)


@app.exception_handler(ConfigurationError)
async def configuration_exception_handler(request: Request, exc: ConfigurationError):
    logger.error(f"{request.method} {request.url.path} - Configuration error: {exc}")
    return error_response(500, str(exc))


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"]
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")


# CORS Configuration
# Portal sessions travel in cookies, so origins must be explicit
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "https://vigyanitacademy.com,https://www.vigyanitacademy.com,http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Routes
app.include_router(enrolment_router)
app.include_router(accounts_router)
app.include_router(staff_router)
app.include_router(courses_router)
app.include_router(communications_router)
app.include_router(address_search_router)
app.include_router(portal_router)


@app.get("/")
async def root():
    return {"message": "Vigyanit Academy API", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
