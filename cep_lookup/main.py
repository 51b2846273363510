import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers.cep import router as cep_router
from .core.config import settings
from .core.logging import configure_logging, CorrelationIdMiddleware
from .core.metrics import PromMiddleware, metrics_endpoint

logger = logging.getLogger(__name__)

meta = APIRouter(tags=["meta"])

@meta.get("/health")
def health():
    # Config only; ViaCEP itself is not called so health checks stay cheap.
    return {
        "status": "ok",
        "env": settings.ENV,
        "upstream": settings.VIACEP_BASE_URL,
        "timeout_ms": settings.CEP_TIMEOUT_MS,
    }

@meta.get("/ping")
def ping():
    return {"pong": True}

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "CEP lookup API starting: upstream=%s timeout_ms=%s batch_max=%s",
        settings.VIACEP_BASE_URL, settings.CEP_TIMEOUT_MS, settings.BATCH_MAX_ITEMS,
    )
    if not settings.API_KEY:
        logger.warning("API_KEY is unset, /v1/cep routes are open")
    yield
    logger.info("CEP lookup API stopped")

def create_app() -> FastAPI:
    """
    App factory so tests and ASGI servers can instantiate cleanly.
    """
    configure_logging()

    app = FastAPI(
        title="CEP Lookup API",
        version="1.0.0",
        description="Brazilian postal code (CEP) lookup backed by ViaCEP.",
        lifespan=lifespan,
    )

    origins = [o.strip() for o in settings.ALLOW_ORIGINS.split(",") if o.strip()] or ["*"]
    # Lookups are read-only GETs plus the batch POST
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET", "POST"],
        allow_headers=["x-api-key", "x-request-id", "content-type"],
        expose_headers=["X-Request-Id"],
    )
    app.add_middleware(CorrelationIdMiddleware)
    if settings.PROMETHEUS_ENABLED:
        app.add_middleware(PromMiddleware)
        app.add_route("/v1/metrics", metrics_endpoint, methods=["GET"])

    app.include_router(meta, prefix="/v1")
    app.include_router(cep_router, prefix="/v1", tags=["cep"])
    return app

app = create_app()
