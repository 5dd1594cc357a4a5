import pytest

from brandos.clustering import (
    classify_cluster,
    cluster_similar_topics,
    extract_significant_words,
    group_into_topics,
    jaccard_similarity,
    score_cluster,
    select_best_clusters,
)
from conftest import make_item


def test_significant_words_drop_stop_words_and_short_tokens():
    words = extract_significant_words("The New Figma AI Tools for Designers!")
    assert words == {"figma", "tools", "designers"}


def test_jaccard():
    assert jaccard_similarity({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)
    assert jaccard_similarity(set(), {"a"}) == 0.0


def test_similar_headlines_merge():
    items = [
        make_item("Figma launches AI design tools for teams", source="Smashing Magazine",
                  description="short", pub_date="2025-03-10T06:00:00Z"),
        make_item("Unrelated startup raises a big funding round", source="TechCrunch"),
        make_item("Figma launches AI design tools for product teams", source="The Verge",
                  description="a much longer description of the launch", pub_date="2025-03-10T09:00:00Z"),
    ]
    clusters = cluster_similar_topics(items)
    assert len(clusters) == 2
    figma = clusters[0]
    assert figma["title"] == items[0]["title"]
    assert [s["name"] for s in figma["sources"]] == ["Smashing Magazine", "The Verge"]
    assert figma["description"] == "a much longer description of the launch"
    assert figma["pub_date"] == "2025-03-10T09:00:00Z"


def test_same_outlet_is_not_listed_twice():
    items = [
        make_item("Figma launches AI design tools for teams", source="Smashing Magazine"),
        make_item("Figma launches AI design tools for small teams", source="Smashing Magazine"),
    ]
    clusters = cluster_similar_topics(items)
    assert len(clusters) == 1
    assert len(clusters[0]["sources"]) == 1


def test_every_item_lands_in_exactly_one_cluster():
    items = [make_item(f"Completely distinct headline number {w}") for w in ("alpha", "bravo", "charlie")]
    clusters = cluster_similar_topics(items)
    assert sum(len(c["sources"]) for c in clusters) == 3


def _plain_cluster(**overrides):
    cluster = {
        "title": "Quarterly earnings report",
        "description": None,
        "source_category": "general-tech",
        "sources": [{"name": "Wired", "url": "https://wired.com/a"}],
        "pub_date": "2025-03-10T08:00:00Z",
    }
    cluster.update(overrides)
    return cluster


def test_score_components(now):
    assert score_cluster(_plain_cluster(), now) == 15 + 30
    assert score_cluster(_plain_cluster(pub_date="2025-03-01T08:00:00Z"), now) == 15
    assert score_cluster(_plain_cluster(source_category="design-ux"), now) == 15 + 30 + 20
    assert score_cluster(_plain_cluster(description="x" * 101, source_category="general-tech",
                                        pub_date=None), now) == 15 + 15


def test_more_sources_score_higher(now):
    two = _plain_cluster(sources=[{"name": "A", "url": "a"}, {"name": "B", "url": "b"}])
    assert score_cluster(two, now) - score_cluster(_plain_cluster(), now) == 15


def test_classify_cluster_by_keywords():
    assert classify_cluster({"title": "Midjourney v7 generative art update"}) == "ai-creative"


def test_classify_cluster_falls_back_to_source_category():
    assert classify_cluster({"title": "Lorem ipsum dolor", "source_category": "branding"}) == "branding"
    assert classify_cluster({"title": "Lorem ipsum dolor"}) == "general-tech"


def test_selection_caps_each_category_then_backfills(now):
    ai = [
        {"title": f"Midjourney and Claude generative design release {n}", "sources": [{"name": "A", "url": str(n)}]}
        for n in range(4)
    ]
    brand = {"title": "Lorem brand refresh", "sources": [{"name": "B", "url": "b"}]}
    selected = select_best_clusters(ai + [brand], target=4, now=now)
    titles = [c["title"] for c in selected]
    assert len(titles) == 4
    assert "Lorem brand refresh" in titles
    assert titles[0] == ai[0]["title"]
    assert all("score" in c for c in selected)


def test_selection_never_exceeds_available(now):
    assert len(select_best_clusters([_plain_cluster()], target=12, now=now)) == 1


def test_trending_groups_need_two_outlets(now):
    items = [
        make_item("Apple Vision headset pricing revealed", source="Wired", pub_date="2025-03-10T09:00:00Z"),
        make_item("Apple unveils Vision headset pricing", source="The Verge", pub_date="2025-03-10T10:00:00Z"),
        make_item("Unrelated story about gardening tools", source="Engadget", pub_date="2025-03-10T10:00:00Z"),
        make_item("Apple Vision headset pricing from last week", source="9to5Mac", pub_date="2025-03-08T10:00:00Z"),
    ]
    topics = group_into_topics(items, now)
    assert len(topics) == 1
    assert topics[0]["title"] == "Apple unveils Vision headset pricing"
    assert {s["name"] for s in topics[0]["sources"]} == {"The Verge", "Wired"}
