from __future__ import annotations

import asyncio
from typing import Any, AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from sse_starlette.sse import EventSourceResponse

from deepresearch.api.deps import get_cache, get_orchestrator
from deepresearch.models.research import ResearchProgress
from deepresearch.models.schemas import CacheStatsResponse, ResearchRequest
from deepresearch.research_core.orchestrator import ResearchOrchestrator
from deepresearch.services import streaming
from deepresearch.services.search_cache import SearchCache

router = APIRouter(prefix="/api/research", tags=["research"])


async def research_events(
    topic: str,
    orchestrator: ResearchOrchestrator,
) -> AsyncGenerator[dict[str, Any], None]:
    """Run research in a background task and yield one SSE payload per snapshot."""
    queue: asyncio.Queue[ResearchProgress | None] = asyncio.Queue()
    task = asyncio.create_task(orchestrator.run(topic, queue.put_nowait))
    task.add_done_callback(lambda _: queue.put_nowait(None))

    try:
        while (snapshot := await queue.get()) is not None:
            yield streaming.progress(snapshot).to_sse()
            if snapshot.status.is_terminal:
                yield streaming.terminal(snapshot).to_sse()

        if not task.cancelled() and task.exception() is not None:
            exc = task.exception()
            logger.error(f"Research run aborted for {topic!r}: {exc}")
            yield streaming.error(str(exc)).to_sse()
    finally:
        if not task.done():
            task.cancel()


@router.get("/stream")
async def stream_research(
    topic: str = Query(min_length=1, max_length=500),
    orchestrator: ResearchOrchestrator = Depends(get_orchestrator),
):
    """SSE endpoint that streams research progress snapshots."""
    return EventSourceResponse(research_events(topic, orchestrator))


@router.post("", response_model=ResearchProgress)
async def run_research(
    request: ResearchRequest,
    orchestrator: ResearchOrchestrator = Depends(get_orchestrator),
):
    """Run research to completion and return the terminal snapshot."""
    if not request.topic.strip():
        raise HTTPException(status_code=422, detail="Research topic must not be empty")
    return await orchestrator.run(request.topic)


@router.get("/cache", response_model=CacheStatsResponse)
async def cache_stats(cache: SearchCache = Depends(get_cache)):
    stats = cache.stats()
    return CacheStatsResponse(
        size=stats.size,
        max_size=stats.max_size,
        ttl_seconds=stats.ttl_seconds,
        hits=stats.hits,
        misses=stats.misses,
    )


@router.delete("/cache", status_code=204)
async def clear_cache(cache: SearchCache = Depends(get_cache)):
    cache.clear()
