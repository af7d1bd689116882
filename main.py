import json
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from config import settings
from core.logging import RequestIdMiddleware, setup_logging
from db import build_engine, build_session_factory, init_db
from sync.gateway import SqlAlchemyGateway
from sync.local_cache import JsonFileStorage, LocalScanCache, MemoryStorage
from sync.workspace import AssetWorkspace

from api.assets.views import router as assets_router
from api.assignments.views import router as assignments_router
from api.dashboard.views import router as dashboard_router
from api.notifications.views import router as notifications_router
from api.requests.views import router as requests_router
from api.scan.views import my_assets_router
from api.scan.views import router as scan_router
from api.sync.views import router as sync_router

logger = structlog.get_logger(__name__)


def get_cors_origins() -> list[str]:
    """Get CORS origins from environment variable or use defaults."""
    cors_env = os.environ.get("CORS_ORIGINS", "")

    # Try to parse as JSON array
    if cors_env:
        try:
            origins = json.loads(cors_env)
            if isinstance(origins, list):
                return origins
        except json.JSONDecodeError:
            # If not valid JSON, treat as comma-separated
            return [o.strip() for o in cors_env.split(",") if o.strip()]

    # Default origins for development
    return [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]


def build_local_cache() -> LocalScanCache:
    if settings.LOCAL_STORE_DIR:
        storage = JsonFileStorage(settings.LOCAL_STORE_DIR)
    else:
        storage = MemoryStorage()
    return LocalScanCache(storage, key=settings.LOCAL_STORE_KEY)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)

    engine = build_engine(settings.DATABASE_URL)
    if settings.CREATE_TABLES:
        await init_db(engine)

    workspace = AssetWorkspace(
        SqlAlchemyGateway(build_session_factory(engine)),
        build_local_cache(),
        activity_window=settings.ACTIVITY_WINDOW,
        warranty_window_days=settings.WARRANTY_WINDOW_DAYS,
    )
    # A failed first load is reported through /sync/status, not fatal
    if not await workspace.init():
        logger.warning("initial_sync_failed", error=workspace.cache.last_error)
    app.state.workspace = workspace
    logger.info("workspace_ready", env=settings.APP_ENV, assets=len(workspace.cache.assets))

    try:
        yield
    finally:
        await workspace.dispose()
        await engine.dispose()


app = FastAPI(
    title="Asset Sync API",
    description="Asset registry sync, QR identity resolution and dashboard statistics",
    version="1.0.0",
    lifespan=lifespan,
)

# Get CORS origins from environment or use defaults
cors_origins = get_cors_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)

# Business endpoints
app.include_router(assets_router, prefix="/api/v1")
app.include_router(assignments_router, prefix="/api/v1")
app.include_router(requests_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(scan_router, prefix="/api/v1")
app.include_router(my_assets_router, prefix="/api/v1")
app.include_router(dashboard_router, prefix="/api/v1")
app.include_router(sync_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health", tags=["system"])
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}
