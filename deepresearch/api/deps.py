from __future__ import annotations

from deepresearch.research_core.orchestrator import ResearchOrchestrator
from deepresearch.services.search_cache import SearchCache, get_search_cache


def get_cache() -> SearchCache:
    return get_search_cache()


def get_orchestrator() -> ResearchOrchestrator:
    """Orchestrator wired to the configured provider and the process-wide cache."""
    return ResearchOrchestrator(cache=get_search_cache())
