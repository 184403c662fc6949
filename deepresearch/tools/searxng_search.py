from __future__ import annotations

import httpx

from deepresearch.config import settings
from deepresearch.exceptions import SearchProviderError
from deepresearch.models.research import SearchResponse, SearchResult
from deepresearch.tools import web_utils


async def search(
    query: str,
    *,
    instance: str | None = None,
    max_results: int | None = None,
) -> SearchResponse:
    """Query a SearxNG instance through its JSON API."""
    base_url = (instance or settings.searxng_instance).rstrip("/")
    limit = max_results or settings.search_max_results_per_query

    try:
        async with httpx.AsyncClient(timeout=settings.search_http_timeout_seconds) as client:
            response = await client.get(
                f"{base_url}/search",
                params={"q": query, "format": "json"},
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPError as e:
        raise SearchProviderError(f"SearxNG search failed: {e}") from e
    except ValueError as e:
        raise SearchProviderError(f"SearxNG returned invalid JSON: {e}") from e

    results = [
        SearchResult(
            title=item.get("title", "") or "",
            url=item.get("url", "") or "",
            snippet=web_utils.clean_text(item.get("content", "") or ""),
            source="SearxNG",
        )
        for item in (payload.get("results") or [])[:limit]
    ]
    return SearchResponse(query=query, results=results, provider="searxng")
