from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi.routing import APIRouter
from loguru import logger

from hatchery.catalog.cache import WorkerModelCache
from hatchery.catalog.db.engine import create_engine, create_session_factory
from hatchery.catalog.log import setup_logging
from hatchery.catalog.settings import get_settings


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level)

    _app.state.auth_token = settings.resolve_auth_token()
    if not settings.auth_token:
        logger.warning("No HATCHERY_AUTH_TOKEN set -- generated token: {}", _app.state.auth_token)

    logger.info("Worker model catalog starting (host={}, port={})", settings.host, settings.port)

    # -- Initialise state fields (always present, possibly None) ----------------
    _app.state.db_engine = None
    _app.state.db_session_factory = None
    _app.state.redis = None

    # -- Database --------------------------------------------------------------
    if settings.database_url:
        engine = create_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
        _app.state.db_engine = engine
        _app.state.db_session_factory = create_session_factory(engine)
        logger.info(
            "PostgreSQL: connected (pool_size={}, max_overflow={})",
            settings.db_pool_size,
            settings.db_max_overflow,
        )
    else:
        logger.warning("HATCHERY_DATABASE_URL not set -- catalog endpoints will answer 503")

    # -- Redis -----------------------------------------------------------------
    if settings.redis_url:
        _app.state.redis = aioredis.from_url(
            settings.redis_url,
            decode_responses=False,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        logger.info("Redis: connected")
    else:
        logger.warning("HATCHERY_REDIS_URL not set -- list caching disabled")

    _app.state.model_cache = WorkerModelCache(
        _app.state.redis,
        namespace=settings.cache_namespace,
        ttl=settings.cache_ttl,
    )

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("Worker model catalog shutting down")

    # Close Redis client (returns pooled connections).
    if _app.state.redis is not None:
        await _app.state.redis.aclose()
        logger.info("Redis: closed")

    # Dispose DB engine (closes all pooled connections).
    if _app.state.db_engine is not None:
        await _app.state.db_engine.dispose()
        logger.info("PostgreSQL: disposed")


app = FastAPI(title="Hatchery Worker Model Catalog", lifespan=lifespan)

# ---------------------------------------------------------------------------
# API router -- all backend endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


# -- Catalog routers ---------------------------------------------------------
from hatchery.catalog.routers.groups import router as groups_router  # noqa: E402
from hatchery.catalog.routers.projects import router as projects_router  # noqa: E402
from hatchery.catalog.routers.worker_models import router as worker_models_router  # noqa: E402

api.include_router(worker_models_router)
api.include_router(groups_router)
api.include_router(projects_router)

app.include_router(api)
