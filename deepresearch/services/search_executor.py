from __future__ import annotations

import asyncio
from typing import Callable, Sequence, TypeVar

from loguru import logger

from deepresearch.exceptions import ProviderContractError
from deepresearch.models.research import ResearchProgress, ResearchStep, SearchResponse
from deepresearch.services import logger as log_service
from deepresearch.services.search_cache import SearchCache
from deepresearch.tools.search_provider import SearchProvider

NO_RESULTS_ERROR = "No results found"

T = TypeVar("T")


def batch_queries(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive batches of at most ``size``, preserving order."""
    size = max(size, 1)
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchedSearchExecutor:
    """Runs research steps through the search provider in fixed-size batches.

    Batches run one after another; the steps of a batch run concurrently, so a
    run never has more than ``batch_size`` provider calls in flight. Every
    step outcome is recorded on the step itself and a failed step never
    stops the run.
    """

    def __init__(
        self,
        provider: SearchProvider,
        cache: SearchCache,
        *,
        batch_size: int = 3,
        step_timeout: float = 20.0,
        batch_delay: float = 1.0,
        cache_empty_results: bool = False,
    ):
        self.provider = provider
        self.cache = cache
        self.batch_size = max(int(batch_size), 1)
        self.step_timeout = float(step_timeout)
        self.batch_delay = max(float(batch_delay), 0.0)
        self.cache_empty_results = cache_empty_results

    async def execute(self, progress: ResearchProgress, publish: Callable[[], None]) -> None:
        """Drive every step of ``progress`` to completed or failed.

        ``publish`` is called once when a batch is dispatched and again after
        each individual step finishes.
        """
        batches = batch_queries(progress.steps, self.batch_size)
        dispatched = 0

        for batch_number, batch in enumerate(batches):
            for step in batch:
                step.start()
            dispatched += len(batch)
            progress.current_step = dispatched
            logger.debug(
                f"Dispatching batch {batch_number + 1}/{len(batches)}: {[s.id for s in batch]}"
            )
            publish()

            await self._run_batch(progress.topic, batch, publish)

            if batch_number < len(batches) - 1 and self.batch_delay:
                await asyncio.sleep(self.batch_delay)

    async def _run_batch(self, topic: str, batch: list[ResearchStep], publish: Callable[[], None]) -> None:
        """Run one batch concurrently; a contract error cancels the rest of the batch."""
        try:
            async with asyncio.TaskGroup() as group:
                for step in batch:
                    group.create_task(self._run_step(topic, step, publish))
        except ExceptionGroup as eg:
            for exc in eg.exceptions:
                if isinstance(exc, ProviderContractError):
                    raise exc from None
            raise

    async def _run_step(self, topic: str, step: ResearchStep, publish: Callable[[], None]) -> None:
        cached = self.cache.get(step.query)
        if cached is not None:
            self._record(topic, step, cached, from_cache=True)
            publish()
            return

        try:
            response = await asyncio.wait_for(self.provider.search(step.query), timeout=self.step_timeout)
        except asyncio.TimeoutError:
            step.fail(f"Search timed out after {self.step_timeout:g}s")
            log_service.log_research_step(topic, step.id, step.status.value, {"error": step.error})
            publish()
            return
        except ProviderContractError:
            raise
        except Exception as e:
            step.fail(str(e) or type(e).__name__)
            log_service.log_research_step(topic, step.id, step.status.value, {"error": step.error})
            publish()
            return

        if not isinstance(response, SearchResponse):
            raise ProviderContractError(
                f"Search provider returned {type(response).__name__}, expected SearchResponse"
            )

        if response.results or self.cache_empty_results:
            self.cache.set(step.query, response)
        self._record(topic, step, response, from_cache=False)
        publish()

    def _record(self, topic: str, step: ResearchStep, response: SearchResponse, *, from_cache: bool) -> None:
        if response.results:
            step.complete(response, from_cache=from_cache)
        else:
            step.fail(NO_RESULTS_ERROR)
            step.from_cache = from_cache
        log_service.log_research_step(
            topic,
            step.id,
            step.status.value,
            {"results_count": step.result_count, "from_cache": from_cache, "error": step.error},
        )
