"""Topic classification and sub-query expansion.

The planner is deliberately heuristic: a topic is matched against small
keyword sets, the first matching category wins, and that category's
templates are appended to the verbatim topic. Output is deterministic for a
given topic and calendar year.
"""

from __future__ import annotations

import re
from datetime import date
from enum import Enum

MAX_QUERIES = 8


class TopicKind(str, Enum):
    PERSON = "person"
    PRODUCT = "product"
    COMPARISON = "comparison"
    HOW_TO = "how_to"
    GENERAL = "general"


_PERSON_PATTERN = re.compile(
    r"\b(person|people|ceo|founder|author|artist|scientist)\b", re.IGNORECASE
)
_PRODUCT_PATTERN = re.compile(
    r"\b(review|product|service|app|software|tool|device)\b", re.IGNORECASE
)
_COMPARISON_PATTERN = re.compile(
    r"\b(vs|versus|compare|difference between|better than)\b", re.IGNORECASE
)
_RECENCY_WORDS = ("latest", "recent", "current")

# "{topic}" and "{year}" are filled in by plan().
TOPIC_TEMPLATES: dict[TopicKind, tuple[str, ...]] = {
    TopicKind.PERSON: (
        "{topic} biography and background",
        "{topic} achievements and contributions",
        "{topic} latest news",
    ),
    TopicKind.PRODUCT: (
        "{topic} review and ratings",
        "{topic} features and specifications",
        "{topic} pros and cons",
        "{topic} alternatives and competitors",
    ),
    TopicKind.COMPARISON: (
        "{topic} detailed comparison",
        "{topic} which is better",
        "{topic} user experiences",
    ),
    TopicKind.HOW_TO: (
        "{topic} step by step guide",
        "{topic} tutorial",
        "{topic} best practices",
    ),
    TopicKind.GENERAL: (
        "{topic} comprehensive overview",
        "{topic} latest developments {year}",
        "{topic} expert analysis and insights",
        "{topic} statistics and data",
        "{topic} real world examples and use cases",
    ),
}


def classify_topic(topic: str) -> TopicKind:
    lowered = topic.lower()
    if "who is" in lowered or _PERSON_PATTERN.search(topic):
        return TopicKind.PERSON
    if _PRODUCT_PATTERN.search(topic):
        return TopicKind.PRODUCT
    if _COMPARISON_PATTERN.search(topic):
        return TopicKind.COMPARISON
    if "how to" in lowered or "how do" in lowered:
        return TopicKind.HOW_TO
    return TopicKind.GENERAL


def is_time_sensitive(topic: str) -> bool:
    lowered = topic.lower()
    return any(word in lowered for word in _RECENCY_WORDS)


def plan(topic: str, *, year: int | None = None, max_queries: int = MAX_QUERIES) -> list[str]:
    """Expand a research topic into an ordered list of sub-queries.

    The trimmed topic is always first; the result holds between 1 and
    ``min(max_queries, 8)`` entries. A blank topic plans only itself.
    """
    cleaned = topic.strip()
    if not cleaned:
        return [cleaned]

    current_year = year if year is not None else date.today().year
    limit = min(max(max_queries, 1), MAX_QUERIES)

    queries = [cleaned]
    for template in TOPIC_TEMPLATES[classify_topic(cleaned)]:
        queries.append(template.format(topic=cleaned, year=current_year))

    if is_time_sensitive(cleaned):
        queries.append(f"{cleaned} {current_year}")

    return queries[:limit]
