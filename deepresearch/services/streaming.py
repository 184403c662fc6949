from __future__ import annotations

from typing import Any

from deepresearch.models.events import EventType, SSEEvent
from deepresearch.models.research import ResearchProgress, ResearchStatus, ResearchStep


def _step_data(step: ResearchStep) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": step.id,
        "query": step.query,
        "status": step.status.value,
        "results_count": step.result_count,
        "from_cache": step.from_cache,
    }
    if step.error:
        data["error"] = step.error
    return data


def progress(snapshot: ResearchProgress) -> SSEEvent:
    """Full progress snapshot; the client replaces its state with each one."""
    return SSEEvent(
        event=EventType.PROGRESS,
        data={
            "topic": snapshot.topic,
            "status": snapshot.status.value,
            "current_step": snapshot.current_step,
            "total_steps": snapshot.total_steps,
            "steps": [_step_data(step) for step in snapshot.steps],
        },
    )


def research_complete(snapshot: ResearchProgress) -> SSEEvent:
    sources = [
        {"title": r.title, "url": r.url}
        for step in snapshot.completed_steps
        for r in step.results.results
    ]
    return SSEEvent(
        event=EventType.RESEARCH_COMPLETE,
        data={
            "report": snapshot.final_report or "",
            "sources": sources,
            "completed_steps": len(snapshot.completed_steps),
        },
    )


def research_failed(snapshot: ResearchProgress) -> SSEEvent:
    return SSEEvent(
        event=EventType.RESEARCH_FAILED,
        data={
            "report": snapshot.final_report or "",
            "errors": {step.id: step.error for step in snapshot.failed_steps},
        },
    )


def terminal(snapshot: ResearchProgress) -> SSEEvent:
    if snapshot.status == ResearchStatus.COMPLETED:
        return research_complete(snapshot)
    return research_failed(snapshot)


def error(message: str) -> SSEEvent:
    return SSEEvent(event=EventType.ERROR, data={"message": message})
