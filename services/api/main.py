"""
PDF Signature Zones - Backend API
FastAPI with two storage backends: JSON files and SQLite

Install dependencies:
pip install -e .

Run server:
uvicorn main:app --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
import httpx
from typing import Any, Dict, List
from cachetools import TTLCache
import logging
import os
import re
import time
import uuid
import contextvars
import urllib.parse

from settings import get_settings

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar('request_id', default=None)
request_start_time_var = contextvars.ContextVar('request_start_time', default=None)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def clean_pdf_url(url: str) -> str:
    """Extract Google Storage URL from nested Cloudinary URLs"""
    if not url or 'cloudinary.com' not in url:
        return url

    decoded = url
    for _ in range(5):
        prev = decoded
        decoded = urllib.parse.unquote(decoded)
        if decoded == prev:
            break

    match = re.search(r'https://storage\.googleapis\.com/[^\s"\'<>)]+\.pdf', decoded, re.IGNORECASE)
    if match:
        return match.group(0).replace(' ', '%20')

    return url


def resolve_drive_url(url: str) -> str:
    """Convert Google Drive share links to the direct download form."""
    if "drive.google.com" not in url:
        return url

    if "/file/d/" in url:
        file_id = url.split("/file/d/")[1].split("/")[0].split("?")[0]
    elif "id=" in url:
        file_id = url.split("id=")[1].split("&")[0]
    elif "/folders/" in url:
        raise HTTPException(
            status_code=400,
            detail="This is a Google Drive FOLDER URL. Please provide a FILE URL instead."
        )
    else:
        raise HTTPException(status_code=400, detail="Invalid Google Drive URL format. Please use a direct file link.")

    return f"https://drive.google.com/uc?export=download&id={file_id}"

# ============================================================================
# BACKEND CONFIGURATION
# ============================================================================
settings = get_settings()

STORAGE_BACKEND = settings.storage_backend.lower()
ALLOWED_ORIGINS = settings.get_origins_list()

logger.info(f"Storage Backend: {STORAGE_BACKEND.upper()}")

# ============================================================================
# STORAGE ADAPTER INITIALIZATION
# ============================================================================

def build_storage_adapter(cfg) -> Any:
    backend = cfg.storage_backend.lower()
    if backend == "json":
        from adapters.json import JsonAdapter
        logger.info(f"Initializing JSON adapter in {cfg.data_dir}")
        return JsonAdapter(data_dir=cfg.data_dir)
    if backend == "sqlite":
        from adapters.sqlite import SqliteAdapter
        logger.info(f"Initializing SQLite adapter ({cfg.db_url.split('://')[0]})")
        return SqliteAdapter.from_url(cfg.db_url)
    raise ValueError(f"Unknown STORAGE_BACKEND: {cfg.storage_backend}")


storage_adapter = build_storage_adapter(settings)

# ---- DI helper (used by routers/*) ----
def get_storage_adapter(_=None):
    return storage_adapter

# ============================================================================
# CACHE
# ============================================================================

zone_cache = TTLCache(maxsize=256, ttl=settings.zone_cache_ttl_s)


def storage_get_zones(doc_id: str) -> List[Dict[str, Any]]:
    """
    Zone rows of a document, ordered by order_index.
    NOTE: returns plain dicts; callers get copies so the cache stays intact.
    """
    rows = zone_cache.get(doc_id)
    if rows is None:
        rows = storage_adapter.list_zones(doc_id)
        zone_cache[doc_id] = rows
    return [dict(r) for r in rows]


def invalidate_zone_cache(doc_id: str) -> None:
    zone_cache.pop(doc_id, None)

# ============================================================================
# FASTAPI APP
# ============================================================================

app = FastAPI(
    title="PDF Signature Zones API",
    description="Backend API for drawing signature zones on PDFs and collecting signatures",
    version="1.0",
    docs_url="/docs",
    redoc_url="/redoc"
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
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({round(latency * 1000, 2)} ms)",
        extra={"request_id": request_id},
    )

    response.headers["X-Request-ID"] = request_id
    return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
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
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    try:
        storage_adapter.ping()
        return {
            "status": "healthy",
            "backend": STORAGE_BACKEND,
            "version": "1.0"
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "backend": STORAGE_BACKEND, "error": str(e)}
        )


@app.get("/healthz")
async def healthz():
    """
    Kubernetes-style liveness probe.
    Returns 200 if the application is running.
    """
    return {
        "status": "ok",
        "timestamp": time.time(),
        "version": "1.0"
    }


@app.get("/readyz")
async def readyz():
    """
    Kubernetes-style readiness probe.
    Returns 200 if storage is reachable, 503 if not.
    """
    try:
        storage_adapter.ping()
        return {
            "status": "ready",
            "backend": STORAGE_BACKEND,
            "cache_size": len(zone_cache),
            "timestamp": time.time()
        }
    except Exception as e:
        logger.error(f"Readiness check failed: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "backend": STORAGE_BACKEND,
                "error": str(e),
                "timestamp": time.time()
            }
        )


@app.get("/")
async def root():
    """API root endpoint"""
    return {
        "message": "PDF Signature Zones API",
        "version": "1.0",
        "backend": STORAGE_BACKEND,
        "status": "running",
        "docs": "/docs"
    }


# ========== PDF Proxy Endpoint ==========
@app.get("/proxy-pdf")
async def proxy_pdf(url: str):
    """
    Proxy PDF files to avoid CORS issues for the page renderer.
    Supports Google Drive, nested Cloudinary/Glide URLs, etc.
    """
    original_url = url
    url = resolve_drive_url(clean_pdf_url(url))
    logger.info(f"[proxy-pdf] resolved URL: {url} (from {original_url})")

    try:
        async with httpx.AsyncClient(timeout=settings.proxy_timeout_s, follow_redirects=True) as client:
            response = await client.get(url)
    except httpx.TimeoutException:
        logger.error(f"Timeout fetching PDF: {url}")
        raise HTTPException(status_code=504, detail="PDF fetch timeout")
    except httpx.RequestError as e:
        logger.error(f"Error fetching PDF: {str(e)}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch PDF: {str(e)}")

    if response.status_code != 200:
        logger.error(f"Failed to fetch PDF: {response.status_code}")
        raise HTTPException(
            status_code=response.status_code,
            detail=f"Failed to fetch PDF: HTTP {response.status_code}"
        )

    content_type = response.headers.get("content-type", "")
    if "pdf" not in content_type.lower() and "octet-stream" not in content_type.lower():
        # Still served; some hosts send PDFs without the right header
        logger.warning(f"URL returned non-PDF content: {content_type}")

    logger.info(f"Successfully proxied PDF from {url} ({len(response.content)} bytes)")

    return StreamingResponse(
        iter([response.content]),
        media_type="application/pdf",
        headers={
            "Access-Control-Allow-Origin": "*",
            "Cache-Control": "public, max-age=3600",
            "Content-Length": str(len(response.content))
        }
    )

# ========== Routers ==========
from routers import sign_documents as sign_documents_router
app.include_router(sign_documents_router.router)

from routers import signatures as signatures_router
app.include_router(signatures_router.router)


@app.on_event("startup")
async def startup_event():
    logger.info("PDF Signature Zones API starting up...")
    logger.info(f"Storage Backend: {STORAGE_BACKEND.upper()}")
    logger.info(f"Allowed origins: {ALLOWED_ORIGINS}")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("PDF Signature Zones API shutting down...")
    engine = getattr(storage_adapter, "engine", None)
    if engine is not None:
        engine.dispose()

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
