from __future__ import annotations

from typing import Any

from tavily import AsyncTavilyClient

from deepresearch.config import settings
from deepresearch.exceptions import SearchProviderError
from deepresearch.models.research import SearchResponse, SearchResult
from deepresearch.tools import web_utils


def _map_results(payload: dict[str, Any], max_results: int) -> list[SearchResult]:
    return [
        SearchResult(
            title=r.get("title", "") or "",
            url=r.get("url", "") or "",
            snippet=web_utils.clean_text(r.get("content", "") or ""),
            source="Tavily",
        )
        for r in (payload.get("results") or [])[:max_results]
    ]


async def search(
    query: str,
    *,
    max_results: int | None = None,
    search_depth: str = "basic",
) -> SearchResponse:
    """Execute a Tavily web search and return structured results."""
    if not settings.tavily_api_key:
        raise SearchProviderError("Tavily search requires TAVILY_API_KEY")

    limit = max_results or settings.search_max_results_per_query
    client = AsyncTavilyClient(api_key=settings.tavily_api_key)
    payload = await client.search(
        query=query,
        search_depth=search_depth,
        max_results=limit,
    )
    return SearchResponse(query=query, results=_map_results(payload, limit), provider="tavily")
