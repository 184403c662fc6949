from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from deepresearch.exceptions import InvalidStepTransition


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SearchResult(BaseModel):
    """One hit returned by a search provider."""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    snippet: str = ""
    source: Optional[str] = None  # provider label, e.g. "DuckDuckGo"


class ScoredResult(SearchResult):
    """A search result with the relevance score assigned by the ranker."""

    relevance_score: int = Field(default=0, ge=0)


class SearchResponse(BaseModel):
    """Result set for a single query, as returned by a provider."""

    model_config = ConfigDict(frozen=True)

    query: str
    results: tuple[SearchResult, ...] = ()
    timestamp: datetime = Field(default_factory=_utc_now)
    provider: Optional[str] = None
    fallback_from: Optional[str] = None
    fallback_reason: Optional[str] = None


class StepStatus(str, Enum):
    PENDING = "pending"
    SEARCHING = "searching"
    COMPLETED = "completed"
    FAILED = "failed"


# Allowed forward moves; terminal states have none.
_STEP_TRANSITIONS: dict[StepStatus, frozenset[StepStatus]] = {
    StepStatus.PENDING: frozenset({StepStatus.SEARCHING}),
    StepStatus.SEARCHING: frozenset({StepStatus.COMPLETED, StepStatus.FAILED}),
    StepStatus.COMPLETED: frozenset(),
    StepStatus.FAILED: frozenset(),
}


class ResearchStep(BaseModel):
    """One planned sub-query and its outcome."""

    id: str  # "step-<ordinal>"
    query: str
    status: StepStatus = StepStatus.PENDING
    results: Optional[SearchResponse] = None
    error: Optional[str] = None
    from_cache: bool = False

    @property
    def is_finished(self) -> bool:
        return self.status in (StepStatus.COMPLETED, StepStatus.FAILED)

    @property
    def result_count(self) -> int:
        return len(self.results.results) if self.results else 0

    def advance(self, status: StepStatus) -> None:
        if status not in _STEP_TRANSITIONS[self.status]:
            raise InvalidStepTransition(
                f"{self.id}: cannot move from {self.status.value} to {status.value}"
            )
        self.status = status

    def start(self) -> None:
        self.advance(StepStatus.SEARCHING)

    def complete(self, response: SearchResponse, *, from_cache: bool = False) -> None:
        self.advance(StepStatus.COMPLETED)
        self.results = response
        self.from_cache = from_cache
        self.error = None

    def fail(self, error: str) -> None:
        self.advance(StepStatus.FAILED)
        self.results = None
        self.error = error


class ResearchStatus(str, Enum):
    PLANNING = "planning"
    RESEARCHING = "researching"
    SYNTHESIZING = "synthesizing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ResearchStatus.COMPLETED, ResearchStatus.FAILED)


class ResearchProgress(BaseModel):
    """Externally visible state of one research run.

    The engine mutates a single working instance; callers only ever receive
    copies produced by ``snapshot()``.
    """

    topic: str
    current_step: int = 0
    total_steps: int = 0
    steps: list[ResearchStep] = Field(default_factory=list)
    status: ResearchStatus = ResearchStatus.PLANNING
    final_report: Optional[str] = None

    @property
    def completed_steps(self) -> list[ResearchStep]:
        return [
            s for s in self.steps if s.status == StepStatus.COMPLETED and s.results is not None
        ]

    @property
    def failed_steps(self) -> list[ResearchStep]:
        return [s for s in self.steps if s.status == StepStatus.FAILED]

    @property
    def all_steps_finished(self) -> bool:
        return all(s.is_finished for s in self.steps)

    def snapshot(self) -> ResearchProgress:
        return self.model_copy(deep=True)
