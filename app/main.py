"""ValueMatrix web service entrypoint (uvicorn app.main:app)."""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import load_config, log_config_snapshot
from app.correlation import CorrelationIdMiddleware, RequestIdLogFilter
from app.predictor.config import is_gateway_configured
from app.routers import auth, pages, predict, predictions
from auth.service import cleanup_expired_sessions
from persistence.db import init_db

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
for _handler in logging.getLogger().handlers:
    _handler.addFilter(RequestIdLogFilter())
logger = logging.getLogger(__name__)

_config = load_config()
log_config_snapshot(_config)

MAX_REQUEST_SIZE_BYTES = _config.max_request_size_bytes

# Browser clients send these with the prediction call
CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """413 for bodies declared larger than MAX_REQUEST_SIZE_BYTES."""

    async def dispatch(self, request: Request, call_next):
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > MAX_REQUEST_SIZE_BYTES:
            return JSONResponse(status_code=413, content={"detail": "Request entity too large"})
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Hardening headers on every response; nothing is cacheable."""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Cache-Control": "no-store",
    }

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(self.HEADERS)
        return response


def create_app() -> FastAPI:
    started_at = datetime.now(timezone.utc)

    application = FastAPI(
        title="ValueMatrix",
        description="House price estimates from property details, photos or a spoken description",
        version=_config.service_version,
    )

    # The last middleware added runs first: request ids wrap everything,
    # so 413s and CORS answers carry X-Request-Id and security headers too
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=CORS_ALLOW_HEADERS,
    )
    application.add_middleware(RequestSizeLimitMiddleware)
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(CorrelationIdMiddleware)

    for module in (pages, predict, predictions, auth):
        application.include_router(module.router)

    @application.on_event("startup")
    async def prepare_database():
        init_db()
        cleanup_expired_sessions()
        logger.info("Database ready")

    @application.get("/health")
    async def health():
        """Liveness plus the settings worth seeing at a glance."""
        return {
            "status": "healthy",
            "service": _config.service_name,
            "version": _config.service_version,
            "environment": _config.environment,
            "gateway_configured": is_gateway_configured(),
            "started_at": started_at.isoformat(),
        }

    return application


app = create_app()
