from __future__ import annotations

import time
from typing import Protocol, runtime_checkable

from deepresearch.config import settings
from deepresearch.models.research import SearchResponse
from deepresearch.services import logger as log_service
from deepresearch.tools import brave_search, duckduckgo_search, searxng_search, tavily_search

SUPPORTED_PROVIDERS = ("duckduckgo", "searxng", "brave", "tavily")


@runtime_checkable
class SearchProvider(Protocol):
    async def search(self, query: str) -> SearchResponse: ...


async def _search_with(provider: str, query: str) -> SearchResponse:
    if provider == "duckduckgo":
        return await duckduckgo_search.search(query)
    if provider == "searxng":
        return await searxng_search.search(query)
    if provider == "brave":
        return await brave_search.search(query)
    if provider == "tavily":
        return await tavily_search.search(query)
    raise ValueError(f"Unsupported SEARCH_PROVIDER: {provider}")


async def _timed_search(provider: str, query: str) -> SearchResponse:
    started = time.perf_counter()
    try:
        response = await _search_with(provider, query)
    except Exception as e:
        log_service.log_search_call(
            provider,
            query,
            duration_ms=int((time.perf_counter() - started) * 1000),
            status="error",
            error=str(e),
        )
        raise
    log_service.log_search_call(
        provider,
        query,
        results_count=len(response.results),
        duration_ms=int((time.perf_counter() - started) * 1000),
    )
    return response


async def search(query: str) -> SearchResponse:
    """Search with the configured provider, falling back on error or zero results."""
    provider = settings.search_provider.lower().strip()
    fallback = settings.search_fallback_provider.lower().strip()
    use_fallback = bool(fallback) and fallback != provider

    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(f"Unsupported SEARCH_PROVIDER: {settings.search_provider}")

    try:
        response = await _timed_search(provider, query)
    except Exception as e:
        if not use_fallback:
            raise
        fallback_response = await _timed_search(fallback, query)
        return fallback_response.model_copy(
            update={"fallback_from": provider, "fallback_reason": str(e) or type(e).__name__}
        )

    if response.results or not use_fallback:
        return response

    fallback_response = await _timed_search(fallback, query)
    return fallback_response.model_copy(
        update={"fallback_from": provider, "fallback_reason": f"{provider} returned zero results"}
    )


class ConfiguredSearchProvider:
    """SearchProvider backed by the settings-selected search backend."""

    async def search(self, query: str) -> SearchResponse:
        return await search(query)
