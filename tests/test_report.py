from __future__ import annotations

from deepresearch.models.research import (
    ResearchProgress,
    ResearchStatus,
    ResearchStep,
    ScoredResult,
    SearchResponse,
    SearchResult,
)
from deepresearch.research_core import report


def _completed_step(index: int, query: str, count: int) -> ResearchStep:
    step = ResearchStep(id=f"step-{index}", query=query)
    step.start()
    step.complete(
        SearchResponse(
            query=query,
            results=[SearchResult(title=f"{query} {i}", url=f"https://e.com/{index}/{i}") for i in range(count)],
        )
    )
    return step


def _failed_step(index: int, query: str) -> ResearchStep:
    step = ResearchStep(id=f"step-{index}", query=query)
    step.start()
    step.fail("No results found")
    return step


def test_synthesize_renders_all_sections_in_order():
    steps = [
        _completed_step(0, "rust", 2),
        _failed_step(1, "rust overview"),
        _completed_step(2, "rust news", 1),
    ]
    top = [
        ScoredResult(title="Rust Lang", url="https://rust-lang.org", snippet="A language.", relevance_score=4),
        ScoredResult(title="Rust Wiki", url="https://en.wikipedia.org/wiki/Rust", relevance_score=0),
    ]

    text = report.synthesize("rust", steps, top)

    assert text.startswith("# Deep Research Report: rust\n")
    assert "across 2 different research angles" in text
    assert "Analyzed 3 sources and identified the 2 most relevant findings." in text
    assert "### 1. Rust Lang\n**Source:** https://rust-lang.org\n**Relevance Score:** 4" in text
    assert "A language." in text
    assert "### 2. Rust Wiki\n**Source:** https://en.wikipedia.org/wiki/Rust\n\n---" in text
    assert "**1. rust** - 2 sources found" in text
    assert "**2. rust news** - 1 sources found" in text
    assert "rust overview" not in text
    assert "## All Sources (2)" in text
    assert "2. [Rust Wiki](https://en.wikipedia.org/wiki/Rust)" in text

    sections = ["## Executive Summary", "## Key Findings", "## Research Breakdown", "## All Sources"]
    positions = [text.index(s) for s in sections]
    assert positions == sorted(positions)


def test_synthesize_short_circuits_without_successful_steps():
    text = report.synthesize("rust", [_failed_step(0, "rust")], [])

    assert text == report.NO_DATA_REPORT


def test_format_research_context_only_for_completed_runs():
    progress = ResearchProgress(topic="rust", status=ResearchStatus.COMPLETED, final_report="# Report")
    context = report.format_research_context(progress)

    assert "=== Deep Research Results ===" in context
    assert "# Report" in context

    failed = ResearchProgress(
        topic="rust", status=ResearchStatus.FAILED, final_report=report.RESEARCH_FAILED_REPORT
    )
    assert report.format_research_context(failed) == ""
