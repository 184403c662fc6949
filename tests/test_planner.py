from __future__ import annotations

import pytest

from deepresearch.research_core import planner
from deepresearch.research_core.planner import TopicKind


def test_general_topic_includes_overview_and_dated_developments():
    queries = planner.plan("Rust programming language", year=2026)

    assert queries[0] == "Rust programming language"
    assert planner.classify_topic("Rust programming language") == TopicKind.GENERAL
    assert "Rust programming language comprehensive overview" in queries
    assert "Rust programming language latest developments 2026" in queries
    assert len(queries) == 6


def test_topic_is_trimmed_before_expansion():
    queries = planner.plan("   who is Ada Lovelace  ", year=2026)

    assert queries[0] == "who is Ada Lovelace"
    assert queries[1] == "who is Ada Lovelace biography and background"
    assert len(queries) == 4


@pytest.mark.parametrize(
    ("topic", "kind"),
    [
        ("Who is the founder of Linux", TopicKind.PERSON),
        ("CEO review of the new app", TopicKind.PERSON),
        ("best note taking app review", TopicKind.PRODUCT),
        ("python vs rust", TopicKind.COMPARISON),
        ("difference between TCP and UDP", TopicKind.COMPARISON),
        ("how to bake sourdough bread", TopicKind.HOW_TO),
        ("How do vaccines work", TopicKind.HOW_TO),
        ("apple pie recipe", TopicKind.GENERAL),
    ],
)
def test_classify_topic_follows_precedence(topic, kind):
    assert planner.classify_topic(topic) == kind


def test_product_topic_uses_product_templates():
    queries = planner.plan("Obsidian app", year=2026)

    assert queries == [
        "Obsidian app",
        "Obsidian app review and ratings",
        "Obsidian app features and specifications",
        "Obsidian app pros and cons",
        "Obsidian app alternatives and competitors",
    ]


def test_recency_words_append_year_query_last():
    queries = planner.plan("latest battery research", year=2031)

    assert queries[-1] == "latest battery research 2031"
    assert len(queries) == 7


@pytest.mark.parametrize(
    "topic",
    [
        "x",
        "Rust programming language",
        "current state of fusion energy",
        "recent iPhone review",
        "how to learn latest python",
        "who is the current CEO of Nvidia",
    ],
)
def test_plan_length_is_bounded_and_topic_first(topic):
    queries = planner.plan(topic, year=2026)

    assert 1 <= len(queries) <= 8
    assert queries[0] == topic.strip()


def test_plan_respects_smaller_query_limit():
    queries = planner.plan("Rust programming language", year=2026, max_queries=3)

    assert queries == [
        "Rust programming language",
        "Rust programming language comprehensive overview",
        "Rust programming language latest developments 2026",
    ]


def test_plan_is_deterministic_for_same_year():
    topic = "recent advances in protein folding"
    assert planner.plan(topic, year=2026) == planner.plan(topic, year=2026)


@pytest.mark.parametrize("topic", ["", "   ", "\t\n"])
def test_plan_of_blank_topic_is_just_the_trimmed_topic(topic):
    assert planner.plan(topic, year=2026) == [""]
