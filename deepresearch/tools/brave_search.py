from __future__ import annotations

from typing import Any

import httpx

from deepresearch.config import settings
from deepresearch.exceptions import SearchProviderError
from deepresearch.models.research import SearchResponse, SearchResult
from deepresearch.tools import web_utils

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"


def _map_results(payload: dict[str, Any], max_results: int) -> list[SearchResult]:
    raw_results = payload.get("web", {}).get("results", []) or []
    mapped: list[SearchResult] = []
    for item in raw_results[:max_results]:
        snippets = item.get("extra_snippets", []) or []
        description = item.get("description", "") or ""
        snippet = description.strip() or " ".join(snippets).strip()
        mapped.append(
            SearchResult(
                title=item.get("title", "") or "",
                url=item.get("url", "") or "",
                snippet=web_utils.clean_text(snippet),
                source="Brave",
            )
        )
    return mapped


async def search(query: str, *, max_results: int | None = None) -> SearchResponse:
    """Execute a Brave web search and normalize results."""
    if not settings.brave_api_key:
        raise SearchProviderError("Brave Search requires BRAVE_API_KEY")

    limit = max_results or settings.search_max_results_per_query
    params: dict[str, Any] = {"q": query, "count": limit}

    try:
        async with httpx.AsyncClient(timeout=settings.search_http_timeout_seconds) as client:
            response = await client.get(
                BRAVE_SEARCH_URL,
                params=params,
                headers={
                    "Accept": "application/json",
                    "X-Subscription-Token": settings.brave_api_key,
                },
            )
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPError as e:
        raise SearchProviderError(f"Brave search failed: {e}") from e

    return SearchResponse(query=query, results=_map_results(payload, limit), provider="brave")
