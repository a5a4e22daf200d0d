#!/usr/bin/env python3
"""Run one aggregation from the command line and print the JSON response.

Uses the same settings (environment / .env) as the API server, which makes
it handy for checking provider credentials without starting the server.

Usage:
    python scripts/fetch_feed.py --category business --page-size 10
    python scripts/fetch_feed.py --category sports --search "Premier League OR EPL"
    python scripts/fetch_feed.py --source youtube --summary
"""

import argparse
import asyncio
import json
import sys

from newsdeck.core.config import settings
from newsdeck.core.constants import Category, SourceName, normalize_category
from newsdeck.core.exceptions import SourceMixPolicyError
from newsdeck.models.api.news import FetchNewsResponse
from newsdeck.models.domain.article import AggregationRequest
from newsdeck.services.news_aggregator import NewsAggregationService
from newsdeck.utils.logging import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch one NewsDeck feed page")
    parser.add_argument(
        "--category",
        default=Category.GENERAL.value,
        help="Feed category (default: general)",
    )
    parser.add_argument(
        "--country",
        default=settings.default_country,
        help=f"Two-letter country code (default: {settings.default_country})",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=settings.default_page_size,
        help=f"Articles per page (default: {settings.default_page_size})",
    )
    parser.add_argument("--search", default=None, help="Optional search query")
    parser.add_argument(
        "--source",
        choices=[s.value for s in SourceName],
        default=None,
        help="Fetch from a single source only",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Configure application logging (log lines go to stdout)",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print per-source outcomes instead of the articles",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    try:
        aggregator = NewsAggregationService.from_settings(settings)
    except SourceMixPolicyError as e:
        print(f"Invalid source mix configuration: {e}", file=sys.stderr)
        return 2

    request = AggregationRequest(
        category=normalize_category(args.category),
        country=args.country,
        page_size=max(1, min(args.page_size, settings.max_page_size)),
        search_query=args.search,
        source_selector=SourceName(args.source) if args.source else None,
    )
    result = await aggregator.run(request)

    if args.summary:
        for source_result in result.source_results:
            state = "ok" if source_result.success else f"failed ({source_result.error})"
            print(
                f"{source_result.source.value:<10} {len(source_result.articles):>3} articles "
                f"{source_result.duration_seconds:6.2f}s  {state}"
            )
        print(f"{'page':<10} {len(result.articles):>3} articles, {result.total_results} total")
        return 0

    response = FetchNewsResponse(articles=result.articles, total_results=result.total_results)
    print(json.dumps(response.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))
    return 0


def main() -> int:
    args = parse_args()
    if args.verbose:
        setup_logging()
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
