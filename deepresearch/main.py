import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from deepresearch.api.routes import research
from deepresearch.config import settings
from deepresearch.services import logger as log_service
from deepresearch.services.search_cache import get_search_cache


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    sweeper = asyncio.create_task(
        get_search_cache().run_sweeper(float(settings.search_cache_sweep_interval_seconds))
    )
    log_service.log_event("startup", "Search cache sweeper started")
    yield
    # Shutdown
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper


app = FastAPI(
    title="DeepResearch",
    description="Deep research engine for self-hosted chat front-ends",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(research.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "deepresearch"}
