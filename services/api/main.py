"""
Contract Signer - Backend API
FastAPI service that fills and signs the contract PDF, stores it in Google
Cloud Storage and notifies a webhook.

Install dependencies:
pip install -e .

Run server:
uvicorn main:create_app --factory --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
import contextvars
import logging
import time
import uuid

from adapters.base import BlobStorage
from adapters.gcs import GcsBlobStorage
from adapters.json import JsonRecordFile
from core.fonts import FontProvider
from core.layout import load_layout
from core.signing import SigningService
from core.webhook import WebhookNotifier
from routers import documents as documents_router
from routers import sign as sign_router
from routers import template as template_router
from settings import Settings, get_settings
from stores.document_store import DocumentStore

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar('request_id', default=None)
request_start_time_var = contextvars.ContextVar('request_start_time', default=None)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = "1.0"


def create_app(
    settings: Optional[Settings] = None,
    *,
    blob_storage: Optional[BlobStorage] = None,
    webhook_notifier: Optional[WebhookNotifier] = None,
) -> FastAPI:
    """
    Build the application.

    Everything the routers need is constructed once here and kept on
    app.state. Tests pass their own settings and fakes.
    """
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    # ============================================================================
    # COLLABORATORS
    # ============================================================================

    # Layout is load-bearing for every composition: fail fast if incomplete.
    layout = load_layout(settings.layout_path)

    if blob_storage is None:
        if not settings.gcp_bucket_name:
            raise ValueError("FATAL: GCP_BUCKET_NAME environment variable is not set.")
        blob_storage = GcsBlobStorage(
            bucket=settings.gcp_bucket_name,
            make_public=settings.gcs_make_public,
            public_host=settings.gcs_public_host,
        )
    logger.info(f"🔧 Blob bucket: {blob_storage.bucket} (public={settings.gcs_make_public})")

    store = DocumentStore(JsonRecordFile(settings.pdf_store_path))
    store.load()

    signing_service = SigningService(
        store=store,
        blobs=blob_storage,
        layout=layout,
        fonts=FontProvider(settings.fonts_dir),
        template_path=settings.template_path,
        webhook_url=settings.webhook_url,
        timezone=settings.timezone,
    )

    # ============================================================================
    # FASTAPI APP
    # ============================================================================

    app = FastAPI(
        title="Contract Signer API",
        description="Fills, signs and stores contract PDFs",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.state.settings = settings
    app.state.document_store = store
    app.state.signing_service = signing_service
    app.state.webhook_notifier = webhook_notifier or WebhookNotifier(
        settings.webhook_url, timeout=settings.webhook_timeout_s
    )

    # ========== Request Tracing Middleware ==========
    @app.middleware("http")
    async def request_tracing_middleware(request, call_next):
        """Add request_id and timing to all requests."""
        request_id = str(uuid.uuid4())[:8]
        request_id_var.set(request_id)
        request_start_time_var.set(time.time())

        response = await call_next(request)

        latency = time.time() - request_start_time_var.get()
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": round(latency * 1000, 2),
            }
        )

        response.headers["X-Request-ID"] = request_id
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"}
        )

    # ============================================================================
    # ENDPOINTS
    # ============================================================================

    @app.get("/healthz")
    async def healthz():
        """
        Liveness probe.
        Returns 200 if the application is running.
        """
        return {
            "status": "ok",
            "timestamp": time.time(),
            "version": VERSION,
            "documents": len(store),
        }

    app.include_router(documents_router.router)
    app.include_router(sign_router.router)
    app.include_router(template_router.router)

    logger.info("✓ Contract signer initialized")
    return app
