"""Command line entry points for the batch jobs.

  python -m brandos.cli daily [--dry-run]
  python -m brandos.cli articles [--max 5]
  python -m brandos.cli summaries [--dry-run] [--max N]
  python -m brandos.cli select-featured [--count 3] [--mark] [--generate]
  python -m brandos.cli classify [--dry-run] [--threshold 50]
  python -m brandos.cli sources [--source NAME]

``sources`` performs live HTTP requests against one feed.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .article_generator import generate_articles
from .classifier import classify_news_batch, estimate_classification_cost
from .featured import select_featured
from .models import NEWS_TYPES
from .pipeline import PipelineError, generate_featured_articles, run_daily
from .sources import get_parser, list_source_names
from .storage import ContentStore
from .summaries import summarize_latest_news

logger = logging.getLogger("brandos.cli")


def cmd_daily(args, store: ContentStore) -> int:
    try:
        summary = run_daily(dry_run=args.dry_run, store=store)
    except PipelineError as e:
        logger.error("generation failed: %s", e)
        return 1
    print(
        f"Generated: {summary['news_count']} news + {summary['articles_count']} featured articles"
        f" + {summary['ideas_count']} ideas"
    )
    return 0


def cmd_articles(args, store: ContentStore) -> int:
    articles = generate_articles(max_articles=args.max)
    if not articles:
        logger.error("no articles generated")
        return 1
    manifest = store.save_articles(articles)
    print(f"Generated {len(articles)} articles; manifest lists {len(manifest['articles'])}")
    return 0


def cmd_summaries(args, store: ContentStore) -> int:
    report = summarize_latest_news(store, max_items=args.max, dry_run=args.dry_run)
    print(f"Found {report['candidates']} items without summaries")
    print(f"Estimated cost: ${report['cost']['estimated_cost_usd']:.4f} ({report['cost']['breakdown']})")
    if args.dry_run:
        for i, title in enumerate(report["titles"], 1):
            print(f"  {i}. {title[:60]}")
        return 0
    print(f"Success: {report['success']} | Errors: {report['errors']}")
    return 0


def cmd_select_featured(args, store: ContentStore) -> int:
    candidates = select_featured(store, count=args.count, mark=args.mark)
    for i, c in enumerate(candidates, 1):
        item = c["item"]
        print(f"#{i} Score: {c['score']}/130  {item['title']}")
        print(f"   slug: {c['slug']}")
    if args.generate and candidates:
        clusters = [
            {"title": c["item"]["title"], "description": c["item"].get("description"), "sources": c["item"]["sources"]}
            for c in candidates
        ]
        articles = generate_featured_articles(clusters, target=len(clusters))
        if articles:
            store.save_articles(articles)
        print(f"Generated {len(articles)} featured articles")
    return 0


def cmd_classify(args, store: ContentStore) -> int:
    for news_type in NEWS_TYPES:
        data = store.load_news(news_type)
        if not data:
            continue
        updates = data.get("updates") or []
        results = classify_news_batch(updates, keyword_threshold=args.threshold)
        ai_count = sum(1 for r in results if r["method"] == "ai")
        cost = estimate_classification_cost(ai_count)
        for item, result in zip(updates, results):
            print(f"{news_type}: [{result['category']} {result['confidence']} {result['method']}] {item['title'][:60]}")
            item["topicCategory"] = result["category"]
        print(f"{news_type}: {ai_count} AI classifications, {cost['breakdown']}")
        if not args.dry_run:
            store.write_news(store.news_path(news_type), data)
    return 0


def cmd_sources(args, store: ContentStore) -> int:
    if args.source not in list_source_names():
        print("Unknown source. Available:")
        for n in list_source_names():
            print(" -", n)
        return 2

    parser = get_parser(args.source)
    print(f"Source: {parser.config.name} ({parser.config.kind}, {parser.config.category}, priority {parser.config.priority})")
    print(f"Feed URL: {parser.config.url}")

    items = parser.fetch_items()
    print(f"Fetched items: {len(items)}")
    for i, it in enumerate(items[:3], 1):
        print("\n---")
        print(f"#{i}: {it['title']}")
        print(it["link"])
        print(it["pub_date"])
        description = it.get("description") or ""
        print(description[:300])
        if not description:
            print("[WARN] no description; feed may only carry titles")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="brandos", description="Brand Operating System content jobs")
    ap.add_argument("--data-dir", default=None, help="Override DATA_DIR")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("daily", help="Run the daily content generation")
    p.add_argument("--dry-run", action="store_true")
    p.set_defaults(func=cmd_daily)

    p = sub.add_parser("articles", help="Generate discover articles from trending topics")
    p.add_argument("--max", type=int, default=5)
    p.set_defaults(func=cmd_articles)

    p = sub.add_parser("summaries", help="Write AI summaries for untiered news items")
    p.add_argument("--dry-run", action="store_true")
    p.add_argument("--max", type=int, default=None)
    p.set_defaults(func=cmd_summaries)

    p = sub.add_parser("select-featured", help="Score news items for featured articles")
    p.add_argument("--count", type=int, default=3)
    p.add_argument("--mark", action="store_true", help="Write tier=featured back to the news files")
    p.add_argument("--generate", action="store_true", help="Generate articles for the candidates")
    p.set_defaults(func=cmd_select_featured)

    p = sub.add_parser("classify", help="Re-classify saved news into topic categories")
    p.add_argument("--dry-run", action="store_true")
    p.add_argument("--threshold", type=int, default=50, help="Keyword confidence below which AI is used")
    p.set_defaults(func=cmd_classify)

    p = sub.add_parser("sources", help="Smoke test one RSS source")
    p.add_argument("--source", default="Smashing Magazine", help="Exact source name")
    p.set_defaults(func=cmd_sources)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = ContentStore(args.data_dir)
    return args.func(args, store)


if __name__ == "__main__":
    sys.exit(main())
