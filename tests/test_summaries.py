import pytest

from brandos import summaries
from brandos.llm import GenerationResult
from brandos.summaries import (
    SummaryError,
    estimate_cost,
    estimate_token_usage,
    find_candidates,
    generate_summaries_batch,
    generate_summary,
    summarize_latest_news,
)
from conftest import news_item


def _seed(store):
    store.save_news([
        news_item("Needs summary one"),
        news_item("Already summarised", tier="summary", aiSummary="done"),
        news_item("Needs summary two", sources=[]),
        news_item("Has article", articlePath="/discover/has-article"),
        news_item("Needs summary three"),
    ], date="2025-03-10T08:00:00Z")


def test_generate_summary_without_key(no_keys):
    with pytest.raises(SummaryError):
        generate_summary(news_item("Anything"))


def test_generate_summary(monkeypatch):
    seen = {}

    def fake(prompt, **kwargs):
        seen["prompt"] = prompt
        seen.update(kwargs)
        return GenerationResult(text="  Two paragraphs.  ", model="m", input_tokens=200, output_tokens=180)

    monkeypatch.setattr(summaries, "generate_text", fake)
    result = generate_summary(news_item("Figma AI", description=None))
    assert result["summary"] == "Two paragraphs."
    assert result["model"] == summaries.HAIKU
    assert result["tokenUsage"] == {"promptTokens": 200, "completionTokens": 180}
    assert "Description: Figma AI" in seen["prompt"]
    assert "- Wired: https://wired.com/a" in seen["prompt"]
    assert seen["max_tokens"] == 500


def test_batch_skips_failures(monkeypatch):
    def fake(item):
        if item["title"] == "bad":
            raise SummaryError("nope")
        return {"summary": item["title"]}

    monkeypatch.setattr(summaries, "generate_summary", fake)
    errors = []
    results = generate_summaries_batch(
        [news_item("good"), news_item("bad")], delay=0, on_error=lambda item, e: errors.append(item["title"]),
    )
    assert results == {"good": {"summary": "good"}}
    assert errors == ["bad"]


def test_estimates():
    usage = estimate_token_usage(news_item("Figma AI"))
    assert usage["completionTokens"] == 260
    assert usage["promptTokens"] > 100
    assert estimate_cost(50)["estimated_cost_usd"] == 0.02


def test_find_candidates_in_file_order(store):
    _seed(store)
    candidates = find_candidates(store)
    assert [(c["news_type"], c["index"]) for c in candidates] == [
        ("weekly-update", 0), ("weekly-update", 2), ("monthly-outlook", 1),
    ]


def test_dry_run_writes_nothing(store, monkeypatch):
    _seed(store)
    monkeypatch.setattr(summaries, "generate_summary", pytest.fail)
    report = summarize_latest_news(store, max_items=2, dry_run=True)
    assert report["candidates"] == 3
    assert report["processed"] == 2
    assert report["titles"] == ["Needs summary one", "Needs summary two"]
    assert report["success"] == 0


def test_summaries_are_written_back(store, monkeypatch):
    _seed(store)

    def fake(item):
        if item["title"] == "Needs summary three":
            raise SummaryError("rate limited")
        return {"summary": f"Summary of {item['title']}"}

    monkeypatch.setattr(summaries, "generate_summary", fake)
    report = summarize_latest_news(store, delay=0)
    assert (report["success"], report["errors"]) == (2, 1)

    weekly = store.load_news("weekly-update")["updates"]
    assert weekly[0]["tier"] == "summary"
    assert weekly[0]["aiSummary"] == "Summary of Needs summary one"
    assert weekly[0]["sourceUrl"] == "https://wired.com/a"
    assert weekly[2]["tier"] == "summary"
    assert "sourceUrl" not in weekly[2]
    monthly = store.load_news("monthly-outlook")["updates"]
    assert "tier" not in monthly[1]
