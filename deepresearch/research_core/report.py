from __future__ import annotations

from typing import Sequence

from deepresearch.models.research import (
    ResearchProgress,
    ResearchStatus,
    ResearchStep,
    ScoredResult,
    StepStatus,
)

RESEARCH_FAILED_REPORT = (
    "Deep research failed: no search results could be gathered. This is usually "
    "caused by network issues or an unreachable search provider. Please try again "
    "or configure a different search provider."
)

NO_DATA_REPORT = "No research data could be gathered."


def _successful(steps: Sequence[ResearchStep]) -> list[ResearchStep]:
    return [s for s in steps if s.status == StepStatus.COMPLETED and s.results is not None]


def synthesize(topic: str, steps: Sequence[ResearchStep], top_results: Sequence[ScoredResult]) -> str:
    """Render ranked results and the per-query breakdown as a markdown report."""
    successful = _successful(steps)
    if not successful:
        return NO_DATA_REPORT

    total_sources = sum(s.result_count for s in successful)
    lines: list[str] = [f"# Deep Research Report: {topic}", ""]

    lines += [
        "## Executive Summary",
        "",
        f"Conducted research across {len(successful)} different research angles. "
        f"Analyzed {total_sources} sources and identified the {len(top_results)} most relevant findings.",
        "",
        "## Key Findings (Ranked by Relevance)",
        "",
    ]

    for rank, result in enumerate(top_results, 1):
        lines.append(f"### {rank}. {result.title}")
        lines.append(f"**Source:** {result.url}")
        if result.relevance_score:
            lines.append(f"**Relevance Score:** {result.relevance_score}")
        lines.append("")
        if result.snippet:
            lines += [result.snippet, ""]
        lines += ["---", ""]

    lines += ["## Research Breakdown", ""]
    for index, step in enumerate(successful, 1):
        lines.append(f"**{index}. {step.query}** - {step.result_count} sources found")
    lines.append("")

    lines += [f"## All Sources ({len(top_results)})", ""]
    for rank, result in enumerate(top_results, 1):
        lines.append(f"{rank}. [{result.title}]({result.url})")

    return "\n".join(lines) + "\n"


def format_research_context(progress: ResearchProgress) -> str:
    """Wrap a completed report for inclusion in a chat prompt."""
    if progress.status != ResearchStatus.COMPLETED or not progress.final_report:
        return ""
    return (
        "\n\n=== Deep Research Results ===\n\n"
        f"{progress.final_report}\n\n===\n\n"
        "Please analyze the above research findings and provide insights "
        "based on this comprehensive information.\n\n"
    )
