from __future__ import annotations

import time
from typing import Callable, Optional

from loguru import logger

from deepresearch.config import settings
from deepresearch.exceptions import InvalidStepTransition, ProviderContractError
from deepresearch.models.research import (
    ResearchProgress,
    ResearchStatus,
    ResearchStep,
    SearchResult,
)
from deepresearch.research_core import planner, ranking, report
from deepresearch.services import logger as log_service
from deepresearch.services.search_cache import SearchCache, get_search_cache
from deepresearch.services.search_executor import BatchedSearchExecutor
from deepresearch.tools.search_provider import ConfiguredSearchProvider, SearchProvider

ProgressCallback = Callable[[ResearchProgress], None]

_SESSION_TRANSITIONS: dict[ResearchStatus, frozenset[ResearchStatus]] = {
    ResearchStatus.PLANNING: frozenset({ResearchStatus.RESEARCHING, ResearchStatus.FAILED}),
    ResearchStatus.RESEARCHING: frozenset({ResearchStatus.SYNTHESIZING, ResearchStatus.FAILED}),
    ResearchStatus.SYNTHESIZING: frozenset({ResearchStatus.COMPLETED, ResearchStatus.FAILED}),
    ResearchStatus.COMPLETED: frozenset(),
    ResearchStatus.FAILED: frozenset(),
}


def _check_provider(provider: object) -> None:
    if not callable(getattr(provider, "search", None)):
        raise ProviderContractError(
            f"{type(provider).__name__} does not provide a callable search(query)"
        )


class ResearchOrchestrator:
    """Runs one deep research session per ``run()`` call.

    Flow:
      1. Plan sub-queries for the topic
      2. Execute them in batches through the cache and search provider
      3. Deduplicate and rank the union of results
      4. Render the markdown report

    Every status change is published to the caller as a fresh snapshot of
    ``ResearchProgress``; the working copy is never handed out.
    """

    def __init__(
        self,
        provider: SearchProvider | None = None,
        cache: SearchCache | None = None,
        executor: BatchedSearchExecutor | None = None,
        *,
        max_queries: int | None = None,
        top_results: int | None = None,
    ):
        self.provider = provider if provider is not None else ConfiguredSearchProvider()
        _check_provider(self.provider)
        self.cache = cache if cache is not None else get_search_cache()
        self.executor = executor or BatchedSearchExecutor(
            self.provider,
            self.cache,
            batch_size=int(settings.research_batch_size),
            step_timeout=float(settings.research_step_timeout_seconds),
            batch_delay=float(settings.research_batch_delay_seconds),
            cache_empty_results=bool(settings.search_cache_empty_results),
        )
        self.max_queries = int(settings.research_max_queries) if max_queries is None else max_queries
        self.top_results = int(settings.research_top_results) if top_results is None else top_results

    async def run(self, topic: str, on_progress: Optional[ProgressCallback] = None) -> ResearchProgress:
        started = time.perf_counter()
        last_snapshot: ResearchProgress | None = None

        def publish() -> None:
            nonlocal last_snapshot
            last_snapshot = progress.snapshot()
            if on_progress is not None:
                on_progress(last_snapshot)

        if not topic.strip():
            raise ValueError("Research topic must not be empty")

        queries = planner.plan(topic, max_queries=self.max_queries)
        cleaned_topic = queries[0]
        logger.info(f"Research plan for {cleaned_topic!r}: {len(queries)} sub-queries")
        progress = ResearchProgress(
            topic=cleaned_topic,
            total_steps=len(queries),
            steps=[ResearchStep(id=f"step-{i}", query=q) for i, q in enumerate(queries)],
        )
        publish()

        self._transition(progress, ResearchStatus.RESEARCHING)
        publish()

        await self.executor.execute(progress, publish)

        successful = progress.completed_steps
        if not successful:
            logger.warning(f"Research failed for {cleaned_topic!r}: every sub-query failed")
            progress.final_report = report.RESEARCH_FAILED_REPORT
            self._transition(progress, ResearchStatus.FAILED)
            publish()
            self._log_finished(progress, started)
            return last_snapshot

        self._transition(progress, ResearchStatus.SYNTHESIZING)
        publish()

        all_results: list[SearchResult] = [r for step in successful for r in step.results.results]
        top = ranking.process(all_results, cleaned_topic, limit=self.top_results)
        progress.final_report = report.synthesize(cleaned_topic, progress.steps, top)
        self._transition(progress, ResearchStatus.COMPLETED)
        publish()

        self._log_finished(progress, started)
        return last_snapshot

    @staticmethod
    def _transition(progress: ResearchProgress, status: ResearchStatus) -> None:
        if status not in _SESSION_TRANSITIONS[progress.status]:
            raise InvalidStepTransition(
                f"Research cannot move from {progress.status.value} to {status.value}"
            )
        if status in (ResearchStatus.SYNTHESIZING, ResearchStatus.COMPLETED) and not progress.all_steps_finished:
            raise InvalidStepTransition(f"Research cannot enter {status.value} with unfinished steps")
        progress.status = status

    @staticmethod
    def _log_finished(progress: ResearchProgress, started: float) -> None:
        log_service.log_event(
            "research_finished",
            f"Research {progress.status.value}: {progress.topic}",
            runtime_ms=int((time.perf_counter() - started) * 1000),
            completed_steps=len(progress.completed_steps),
            failed_steps=len(progress.failed_steps),
            total_steps=progress.total_steps,
        )


async def run_research(
    topic: str,
    on_progress: Optional[ProgressCallback] = None,
    **kwargs,
) -> ResearchProgress:
    """Run a deep research session and return its terminal snapshot."""
    return await ResearchOrchestrator(**kwargs).run(topic, on_progress)
