from __future__ import annotations

from urllib.parse import parse_qs, quote, quote_plus, urlparse

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from deepresearch.config import settings
from deepresearch.models.research import SearchResponse, SearchResult
from deepresearch.tools import web_utils

DUCKDUCKGO_HTML_URL = "https://html.duckduckgo.com/html/"

USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36"


def _resolve_href(href: str) -> str:
    """Unwrap DuckDuckGo's /l/?uddg= redirect links to the target URL."""
    if href.startswith("//"):
        href = "https:" + href
    parsed = urlparse(href)
    if parsed.path.startswith("/l/"):
        target = parse_qs(parsed.query).get("uddg")
        if target:
            return target[0]
    return href


def parse_results(html: str, max_results: int = 5) -> list[SearchResult]:
    """Parse the DuckDuckGo HTML results page."""
    soup = BeautifulSoup(html, "html.parser")
    results: list[SearchResult] = []
    for element in soup.select(".result"):
        title_el = element.select_one(".result__a")
        snippet_el = element.select_one(".result__snippet")
        if title_el is None or snippet_el is None:
            continue

        url_el = element.select_one(".result__url")
        href = title_el.get("href") or (url_el.get_text(strip=True) if url_el else "")
        url = _resolve_href(str(href))
        if not web_utils.is_valid_url(url):
            continue

        results.append(
            SearchResult(
                title=title_el.get_text(strip=True),
                url=url,
                snippet=web_utils.clean_text(snippet_el.get_text(" ", strip=True)),
                source="DuckDuckGo",
            )
        )
        if len(results) >= max_results:
            break
    return results


def _candidate_urls(query: str) -> list[str]:
    target = f"{DUCKDUCKGO_HTML_URL}?q={quote_plus(query)}"
    return [target] + [f"{proxy}{quote(target, safe='')}" for proxy in settings.duckduckgo_proxy_list]


async def search(query: str, *, max_results: int | None = None) -> SearchResponse:
    """Search DuckDuckGo's HTML endpoint, trying each configured proxy in turn.

    Returns an empty response rather than raising when every endpoint fails,
    so callers treat an unreachable DuckDuckGo like a query with no hits.
    """
    limit = max_results or settings.search_max_results_per_query

    async with httpx.AsyncClient(
        timeout=settings.search_http_timeout_seconds,
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
    ) as client:
        for url in _candidate_urls(query):
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.warning(f"DuckDuckGo endpoint failed ({url[:60]}...): {e}")
                continue

            results = parse_results(response.text, max_results=limit)
            if results:
                return SearchResponse(query=query, results=results, provider="duckduckgo")

    logger.error(f"All DuckDuckGo endpoints failed for query: {query!r}")
    return SearchResponse(query=query, results=[], provider="duckduckgo")
