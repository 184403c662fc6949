from __future__ import annotations

import asyncio

import pytest

from deepresearch.models.research import SearchResponse, SearchResult
from deepresearch.services.search_cache import SearchCache


def make_response(query: str, count: int = 2) -> SearchResponse:
    slug = "-".join(query.lower().split())
    return SearchResponse(
        query=query,
        results=[
            SearchResult(
                title=f"{query} result {i}",
                url=f"https://example.com/{slug}/{i}",
                snippet=f"Snippet {i} about {query}",
                source="Fake",
            )
            for i in range(count)
        ],
        provider="fake",
    )


class FakeProvider:
    """In-memory search provider that records calls and concurrency."""

    def __init__(
        self,
        *,
        empty: tuple[str, ...] = (),
        errors: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
        all_empty: bool = False,
        default_delay: float = 0.01,
    ):
        self.empty = set(empty)
        self.errors = errors or {}
        self.delays = delays or {}
        self.all_empty = all_empty
        self.default_delay = default_delay
        self.calls: list[str] = []
        self.timeline: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def search(self, query: str) -> SearchResponse:
        self.calls.append(query)
        self.timeline.append(("start", query))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(query, self.default_delay))
            if query in self.errors:
                raise self.errors[query]
            if self.all_empty or query in self.empty:
                return SearchResponse(query=query, results=[], provider="fake")
            return make_response(query)
        finally:
            self.in_flight -= 1
            self.timeline.append(("end", query))


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return SearchCache(ttl_seconds=600, max_entries=50, clock=clock)
