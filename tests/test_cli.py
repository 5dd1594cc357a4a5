import pytest

from brandos import cli
from brandos.pipeline import PipelineError
from brandos.sources import base
from conftest import news_item


def _run(data_dir, *argv):
    return cli.main(["--data-dir", str(data_dir), *argv])


def test_daily(monkeypatch, data_dir, capsys):
    monkeypatch.setattr(cli, "run_daily", lambda dry_run, store: {
        "news_count": 12, "articles_count": 2, "ideas_count": 15,
    })
    assert _run(data_dir, "daily", "--dry-run") == 0
    assert "Generated: 12 news + 2 featured articles + 15 ideas" in capsys.readouterr().out


def test_daily_failure(monkeypatch, data_dir):
    def fail(dry_run, store):
        raise PipelineError("No RSS items fetched. Check network connectivity.")

    monkeypatch.setattr(cli, "run_daily", fail)
    assert _run(data_dir, "daily") == 1


def test_articles_saves_and_lists_manifest(monkeypatch, store, data_dir, capsys):
    article = {"slug": "figma-ships-ai", "title": "Figma ships AI", "publishedAt": "2025-03-10T12:00:00Z"}
    monkeypatch.setattr(cli, "generate_articles", lambda max_articles: [article])
    assert _run(data_dir, "articles", "--max", "1") == 0
    assert "Generated 1 articles; manifest lists 1" in capsys.readouterr().out
    assert store.load_article("figma-ships-ai")["title"] == "Figma ships AI"


def test_articles_none_generated(monkeypatch, data_dir):
    monkeypatch.setattr(cli, "generate_articles", lambda max_articles: [])
    assert _run(data_dir, "articles") == 1


def test_summaries_dry_run(store, data_dir, capsys):
    store.save_news([news_item("Needs a summary"), news_item("Done", tier="summary")], date="2025-03-10T12:00:00Z")
    assert _run(data_dir, "summaries", "--dry-run") == 0
    out = capsys.readouterr().out
    assert "Found 1 items without summaries" in out
    assert "1. Needs a summary" in out


def test_classify_writes_topic_category(store, data_dir):
    store.save_news([news_item("Rebrand: new logo and visual identity", description="branding")],
                    date="2025-03-10T12:00:00Z")
    assert _run(data_dir, "classify", "--threshold", "0") == 0
    assert store.load_news("weekly-update")["updates"][0]["topicCategory"] == "branding"


def test_classify_dry_run_leaves_files(store, data_dir):
    store.save_news([news_item("Rebrand: new logo and visual identity")], date="2025-03-10T12:00:00Z")
    assert _run(data_dir, "classify", "--dry-run", "--threshold", "0") == 0
    assert "topicCategory" not in store.load_news("weekly-update")["updates"][0]


def test_select_featured_mark(store, data_dir, capsys):
    store.save_news([news_item("Brand design launch", timestamp="2025-03-10T08:00:00Z")], date="2025-03-10T12:00:00Z")
    assert _run(data_dir, "select-featured", "--count", "1", "--mark") == 0
    assert "slug: brand-design-launch" in capsys.readouterr().out
    assert store.load_news("weekly-update")["updates"][0]["tier"] == "featured"


def test_unknown_source(data_dir, capsys):
    assert _run(data_dir, "sources", "--source", "Nope") == 2
    assert "Smashing Magazine" in capsys.readouterr().out


def test_source_smoke(monkeypatch, data_dir, capsys):
    item = {"title": "A fetched headline", "link": "https://x.com/a", "pub_date": "2025-03-10T08:00:00Z",
            "description": None}
    monkeypatch.setattr(base, "fetch_feed", lambda config, client=None: [item])
    assert _run(data_dir, "sources") == 0
    out = capsys.readouterr().out
    assert "Fetched items: 1" in out
    assert "[WARN] no description" in out


def test_command_is_required():
    with pytest.raises(SystemExit):
        cli.main([])
