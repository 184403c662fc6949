"""DeepResearch - Deep Research Engine

Simple CLI for running research topics.
"""

import argparse
import asyncio
import sys

from deepresearch.config import settings
from deepresearch.models.research import ResearchProgress, ResearchStatus
from deepresearch.research_core.orchestrator import run_research

STATUS_MARKS = {
    "pending": " ",
    "searching": "~",
    "completed": "+",
    "failed": "!",
}


class ProgressPrinter:
    """Prints step transitions as they arrive in progress snapshots."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet
        self._seen: dict[str, str] = {}
        self._status: ResearchStatus | None = None

    def __call__(self, snapshot: ResearchProgress) -> None:
        if self.quiet:
            return

        if snapshot.status != self._status:
            self._status = snapshot.status
            if snapshot.status == ResearchStatus.PLANNING:
                print(f"\n[*] Research Plan ({snapshot.total_steps} steps):")
                for i, step in enumerate(snapshot.steps, 1):
                    print(f"  {i}. {step.query[:80]}")
            else:
                print(f"\n[*] {snapshot.status.value.capitalize()}...")

        for step in snapshot.steps:
            status = step.status.value
            if self._seen.get(step.id) == status or status == "pending":
                continue
            self._seen[step.id] = status
            line = f"  [{STATUS_MARKS[status]}] {step.id}: {step.query[:70]}"
            if step.error:
                line += f" ({step.error})"
            elif step.results is not None:
                line += f" - {step.result_count} results{' (cached)' if step.from_cache else ''}"
            print(line)


async def run(topic: str, quiet: bool) -> int:
    """Run research on the given topic."""
    print(f"Research topic: {topic}")
    print("-" * 50)

    final = await run_research(topic, ProgressPrinter(quiet=quiet))

    print(f"\n{'='*50}")
    print("REPORT:" if final.status == ResearchStatus.COMPLETED else "RESEARCH FAILED:")
    print(f"{'='*50}")
    print(final.final_report or "")
    return 0 if final.status == ResearchStatus.COMPLETED else 1


def main():
    parser = argparse.ArgumentParser(description="DeepResearch Engine")
    parser.add_argument("--topic", "-t", required=True, help="Research topic")
    parser.add_argument(
        "--provider",
        "-p",
        choices=["duckduckgo", "searxng", "brave", "tavily"],
        help="Search provider (default: from config)",
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="Only print the final report")

    args = parser.parse_args()
    if args.provider:
        settings.search_provider = args.provider

    sys.exit(asyncio.run(run(args.topic, args.quiet)))


if __name__ == "__main__":
    main()
