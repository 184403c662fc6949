from __future__ import annotations

from typing import Iterable

from deepresearch.models.research import ScoredResult, SearchResult
from deepresearch.tools import web_utils

MIN_TERM_LENGTH = 3
TITLE_MATCH_POINTS = 3
SNIPPET_MATCH_POINTS = 1
RICH_SNIPPET_LENGTH = 100
RICH_SNIPPET_POINTS = 1
TRUSTED_DOMAIN_POINTS = 2
DEFAULT_LIMIT = 20

TRUSTED_DOMAINS = ("wikipedia.org", "github.com", "stackoverflow.com")
TRUSTED_SUFFIXES = (".edu", ".gov")


def deduplicate(results: Iterable[SearchResult]) -> list[SearchResult]:
    """Keep the first result for each normalized URL, preserving order."""
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for result in results:
        key = web_utils.normalize_url(result.url)
        if key in seen:
            continue
        seen.add(key)
        unique.append(result)
    return unique


def topic_terms(topic: str) -> list[str]:
    return [t for t in topic.lower().split() if len(t) >= MIN_TERM_LENGTH]


def is_trusted_domain(url: str) -> bool:
    host = web_utils.extract_domain(url)
    if not host:
        return False
    if any(host == d or host.endswith("." + d) for d in TRUSTED_DOMAINS):
        return True
    return host.endswith(TRUSTED_SUFFIXES)


def score_result(result: SearchResult, terms: list[str]) -> int:
    title = (result.title or "").lower()
    snippet = (result.snippet or "").lower()

    score = 0
    for term in terms:
        if term in title:
            score += TITLE_MATCH_POINTS
        if term in snippet:
            score += SNIPPET_MATCH_POINTS

    if len(snippet) > RICH_SNIPPET_LENGTH:
        score += RICH_SNIPPET_POINTS
    if is_trusted_domain(result.url):
        score += TRUSTED_DOMAIN_POINTS
    return score


def rank(results: Iterable[SearchResult], topic: str) -> list[ScoredResult]:
    """Score results against the topic, most relevant first.

    ``sorted`` is stable, so equal scores keep their incoming order.
    """
    terms = topic_terms(topic)
    scored = [
        ScoredResult(**result.model_dump(), relevance_score=score_result(result, terms))
        for result in results
    ]
    return sorted(scored, key=lambda r: r.relevance_score, reverse=True)


def process(
    results: Iterable[SearchResult],
    topic: str,
    *,
    limit: int = DEFAULT_LIMIT,
) -> list[ScoredResult]:
    return rank(deduplicate(results), topic)[: max(limit, 0)]
