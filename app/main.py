import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from app.dependencies import get_db_adapter
from app.exception_handlers import register_exception_handlers
from app.routers import tools
from app.settings import get_settings
from querygate.prom import REGISTRY

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Missing DATABASE_URL raises ConfigurationError here: fatal at startup.
    adapter = get_db_adapter()
    await adapter.open()
    logger.info("Connection pool opened")
    try:
        yield
    finally:
        await adapter.close()


# ----------------------------------------------------------------------------
#  App definition
# ----------------------------------------------------------------------------
app = FastAPI(
    title="Project Insights Query Gateway",
    version=settings.app_version,
    description="Safe, read-only SQL tools over project change history",
    lifespan=lifespan,
)
register_exception_handlers(app)

app.include_router(tools.router, prefix="/api/v1")


# ----------------------------------------------------------------------------
#  Prometheus Metrics Middleware
# ----------------------------------------------------------------------------
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["path", "method", "status_code"],
    registry=REGISTRY,
)
REQUEST_LATENCY = Histogram(
    "http_request_latency_seconds",
    "Request latency (seconds)",
    ["path", "method"],
    registry=REGISTRY,
)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.perf_counter()
    response: Response = await call_next(request)
    elapsed = time.perf_counter() - start
    route = request.scope.get("route")
    path = getattr(route, "path", None) or request.url.path
    name = getattr(route, "name", None) or path

    REQUEST_COUNT.labels(
        path=name,
        method=request.method,
        status_code=str(getattr(response, "status_code", 500)),
    ).inc()
    REQUEST_LATENCY.labels(path=name, method=request.method).observe(elapsed)
    return response


# ----------------------------------------------------------------------------
#  System Endpoints
# ----------------------------------------------------------------------------
@app.get("/healthz", response_class=PlainTextResponse, tags=["system"])
def healthz() -> str:
    return "ok"


@app.get("/readyz", response_class=PlainTextResponse, tags=["system"])
async def readyz() -> str:
    """Readiness probe: a trivial query through the pool."""
    try:
        await get_db_adapter().ping()
        return "ready"
    except Exception as exc:
        logger.debug("Readiness check failed", exc_info=exc)
        raise HTTPException(status_code=503, detail="not ready")


@app.get("/metrics", tags=["system"])
def metrics():
    data = generate_latest(REGISTRY)
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
