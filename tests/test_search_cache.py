from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from deepresearch.models.research import SearchResponse, SearchResult
from deepresearch.services import search_cache
from deepresearch.services.search_cache import SearchCache, normalize_query


def _response(query: str) -> SearchResponse:
    return SearchResponse(
        query=query,
        results=[SearchResult(title=query, url=f"https://example.com/{len(query)}")],
    )


def test_normalize_query_lowercases_trims_and_collapses_whitespace():
    assert normalize_query("  Rust \t  Programming\nLanguage ") == "rust programming language"


def test_set_then_get_returns_same_response(cache):
    response = _response("rust")
    cache.set("rust", response)

    assert cache.get("rust") is response


def test_equivalent_queries_share_an_entry(cache):
    response = _response("rust lang")
    cache.set("Rust   Lang", response)

    assert cache.get("  rust lang ") is response
    assert len(cache) == 1


def test_entry_expires_after_ttl_and_is_removed(cache, clock):
    cache.set("rust", _response("rust"))

    clock.advance(599.9)
    assert cache.get("rust") is not None

    clock.advance(0.1)
    assert cache.get("rust") is None
    assert len(cache) == 0

    cache.set("rust", _response("rust"))
    assert cache.get("rust") is not None


def test_capacity_evicts_oldest_inserted_even_after_reads(clock):
    cache = SearchCache(ttl_seconds=600, max_entries=3, clock=clock)
    for query in ("a", "b", "c"):
        cache.set(query, _response(query))

    assert cache.get("a") is not None  # reads do not refresh position
    cache.set("d", _response("d"))

    assert cache.get("a") is None
    assert cache.get("b") is not None
    assert cache.get("d") is not None
    assert len(cache) == 3


def test_resetting_a_key_moves_it_to_newest(clock):
    cache = SearchCache(ttl_seconds=600, max_entries=3, clock=clock)
    for query in ("a", "b", "c"):
        cache.set(query, _response(query))

    cache.set("A", _response("a2"))
    cache.set("d", _response("d"))

    assert "b" not in cache
    assert cache.get("a").query == "a2"


def test_clear_expired_counts_removed_entries(cache, clock):
    cache.set("old-1", _response("old-1"))
    cache.set("old-2", _response("old-2"))
    clock.advance(400)
    cache.set("fresh", _response("fresh"))
    clock.advance(200)

    assert cache.clear_expired() == 2
    assert len(cache) == 1
    assert "fresh" in cache


def test_stats_track_hits_and_misses(cache):
    cache.set("rust", _response("rust"))
    cache.get("rust")
    cache.get("go")

    stats = cache.stats()
    assert stats.size == 1
    assert stats.max_size == 50
    assert stats.ttl_seconds == 600
    assert stats.hits == 1
    assert stats.misses == 1


def test_clear_removes_everything(cache):
    cache.set("rust", _response("rust"))
    cache.clear()

    assert len(cache) == 0


def test_rejects_non_positive_capacity():
    with pytest.raises(ValueError):
        SearchCache(max_entries=0)


def test_concurrent_access_from_threads_keeps_capacity(clock):
    cache = SearchCache(ttl_seconds=600, max_entries=20, clock=clock)

    def worker(n: int) -> None:
        for i in range(200):
            query = f"q-{n}-{i % 30}"
            cache.set(query, _response(query))
            cache.get(query)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(worker, range(8)))

    assert len(cache) == 20


@pytest.mark.asyncio
async def test_sweeper_removes_expired_entries(cache, clock):
    cache.set("rust", _response("rust"))
    clock.advance(601)

    task = asyncio.create_task(cache.run_sweeper(0.01))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(cache) == 0


def test_get_search_cache_returns_process_wide_instance(monkeypatch):
    monkeypatch.setattr(search_cache, "_cache", None)

    first = search_cache.get_search_cache()
    second = search_cache.get_search_cache()

    assert first is second
    assert first.ttl_seconds == 600
    assert first.max_entries == 50
