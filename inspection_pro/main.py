"""
Point d'entree FastAPI / FastAPI entry point.
Vehicle Inspection Pro - inspections, photos, rapports PDF.
"""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from inspection_pro.api import api_router
from inspection_pro.api.deps import build_services
from inspection_pro.config import settings
from inspection_pro.database import async_session
from inspection_pro.errors import (
    DefectRequiredError,
    InspectionError,
    InvalidBackupError,
    InvalidDefectError,
    MissingInformationError,
    PhotoWriteError,
    ReportGenerationError,
    SharingUnavailableError,
    StorageReadError,
    StorageWriteError,
)
from inspection_pro.rate_limit import limiter

logger = logging.getLogger("inspection_pro")

# Erreur metier -> code HTTP / Domain error -> HTTP status
ERROR_STATUS = {
    StorageWriteError: 500,
    PhotoWriteError: 500,
    ReportGenerationError: 500,
    StorageReadError: 503,
    SharingUnavailableError: 409,
    InvalidBackupError: 400,
    MissingInformationError: 400,
    InvalidDefectError: 400,
    DefectRequiredError: 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialisation et fermeture / Startup and shutdown."""
    services = build_services(async_session)
    # Schema cle-valeur + repertoire photos / Key-value schema + photo directory
    await services.storage.initialize()
    app.state.services = services
    yield


# Desactiver Swagger en production / Disable Swagger in production
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Inspections vehicule, photos et rapports PDF / Vehicle inspections, photos and PDF reports",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def inspection_error_handler(request: Request, exc: InspectionError) -> JSONResponse:
    """Traduire les erreurs metier en reponses HTTP / Map domain errors to HTTP responses."""
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        500,
    )
    if status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": type(exc).__name__})


app.add_exception_handler(InspectionError, inspection_error_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With", "X-Request-ID"],
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Ajoute les headers de securite / Add security headers."""

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


app.add_middleware(SecurityHeadersMiddleware)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Ajoute un X-Request-ID unique a chaque requete / Add unique X-Request-ID to each request."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RequestIDMiddleware)


# Routes API
app.include_router(api_router)


# Sante de l'API / API health check
@app.get("/api/")
async def api_health():
    """Health check."""
    return {"app": settings.APP_NAME, "version": settings.APP_VERSION, "status": "running"}


# Logging JSON structure en production / Structured JSON logging in production
if not settings.DEBUG:
    import json

    class JSONFormatter(logging.Formatter):
        def format(self, record):
            log_entry = {
                "timestamp": self.formatTime(record),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
            if record.exc_info and record.exc_info[0]:
                log_entry["exception"] = self.formatException(record.exc_info)
            return json.dumps(log_entry)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logging.root.handlers = [handler]
    logging.root.setLevel(logging.INFO)
