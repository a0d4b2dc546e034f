"""
FastAPI app entrypoint.

Client portal backend: admin notifications (broadcast + per-admin read receipts), per-user
notifications, document requests (notification source) and notification settings.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from portal.api.routes import document_requests, notifications, settings as settings_routes
from portal.config import settings
from portal.core.errors import STATUS_BAD_REQUEST, ApiError, error_response
from portal.db.session import dispose_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Client portal backend ready")
    yield
    # Close pooled connections so the database sees a clean disconnect
    dispose_engine()
    logger.info("Database pool closed")


app = FastAPI(title="Client Portal", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the production frontend
_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
_cors_origins.extend(settings.cors_origin_list())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def handle_api_error(request, exc: ApiError):
    return error_response(exc.status_code, exc.message, exc.headers)


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request, exc: StarletteHTTPException):
    # 404/405 from routing keep their status and Allow header, but use the {success, message} shape
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request, exc: RequestValidationError):
    return error_response(STATUS_BAD_REQUEST, "Invalid request")


app.include_router(notifications.router, prefix="/api", tags=["notifications"])
app.include_router(document_requests.router, prefix="/api", tags=["document-requests"])
app.include_router(settings_routes.router, prefix="/api", tags=["settings"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Client Portal API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
