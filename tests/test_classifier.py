import pytest

from brandos import classifier
from brandos.classifier import (
    classify_by_keywords,
    classify_news,
    classify_news_batch,
    estimate_classification_cost,
    filter_relevant_news,
    is_relevant,
    score_text_for_category,
)
from brandos.llm import GenerationResult


def test_keyword_score_uses_word_boundaries():
    # "launches" must not count as "launch"
    assert score_text_for_category("Figma launches", "general-tech") == 0
    assert score_text_for_category("Figma launch", "general-tech") > 0


def test_keyword_score_is_capped():
    text = " ".join(["design typography figma prototype"] * 50)
    assert score_text_for_category(text, "design-ux") == 100


def test_classify_by_keywords_picks_best_category():
    result = classify_by_keywords("Figma launches new typography tools for UI design")
    assert result["category"] == "design-ux"
    assert result["confidence"] == 10
    assert set(result["scores"]) == set(classifier.CATEGORIES)


def test_no_keywords_defaults_to_general_tech():
    result = classify_by_keywords("Lorem ipsum dolor sit amet")
    assert result == {"category": "general-tech", "confidence": 0, "scores": result["scores"]}


def test_low_confidence_falls_back_without_api_key(no_keys):
    result = classify_news("Figma launches new typography tools for UI design")
    assert result == {"category": "design-ux", "confidence": 10, "method": "ai"}


def test_keyword_result_used_above_threshold():
    result = classify_news("Figma launches new typography tools for UI design", keyword_threshold=5)
    assert result["method"] == "keywords"


def test_ai_classification(monkeypatch):
    monkeypatch.setattr(
        classifier, "generate_text",
        lambda *a, **k: GenerationResult(text='{"category": "branding", "confidence": 140, "reasoning": "logo"}',
                                         model="m"),
    )
    result = classify_news("Something vague", force_ai=True)
    assert result == {"category": "branding", "confidence": 100, "method": "ai"}


def test_ai_unknown_category_falls_back(monkeypatch):
    monkeypatch.setattr(
        classifier, "generate_text",
        lambda *a, **k: GenerationResult(text='{"category": "sports"}', model="m"),
    )
    result = classifier.classify_by_ai("Figma typography update")
    assert result["category"] == "design-ux"
    assert result["reasoning"] == "Fallback to keyword classification"


def test_batch_only_sends_ambiguous_items_to_ai(monkeypatch):
    calls = []

    def fake_ai(title, description=None):
        calls.append(title)
        return {"category": "startup-business", "confidence": 90, "reasoning": "x"}

    monkeypatch.setattr(classifier, "classify_by_ai", fake_ai)
    items = [{"title": "Lorem ipsum"}, {"title": "Dolor sit amet"}]
    progress = []
    results = classify_news_batch(items, keyword_threshold=0, delay=0, on_progress=lambda d, t: progress.append(d))
    assert calls == []
    assert [r["method"] for r in results] == ["keywords", "keywords"]

    results = classify_news_batch(items, keyword_threshold=50, delay=0, on_progress=lambda d, t: progress.append(d))
    assert calls == ["Lorem ipsum", "Dolor sit amet"]
    assert all(r == {"category": "startup-business", "confidence": 90, "method": "ai"} for r in results)
    assert progress[-1] == 2


def test_filter_relevant_news():
    items = [
        {"title": "Rebrand: new logo and visual identity for brand guidelines", "description": "branding"},
        {"title": "Lorem ipsum"},
    ]
    assert filter_relevant_news(items, min_confidence=1) == items[:1]


def test_is_relevant():
    title = "Rebrand: new logo and visual identity for brand guidelines"
    assert is_relevant(title, "branding", min_confidence=1)
    assert not is_relevant(title, "branding", min_confidence=90)
    assert not is_relevant("Cloud software platform for developers", min_confidence=0)
    assert not is_relevant("Lorem ipsum", min_confidence=0)


@pytest.mark.parametrize("count,expected", [(0, 0.0), (1000, 0.14)])
def test_estimate_classification_cost(count, expected):
    assert estimate_classification_cost(count)["estimated_cost_usd"] == pytest.approx(expected)
