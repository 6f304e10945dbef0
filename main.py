#!/usr/bin/env python3
"""
Backlog API Postman collection generator.

Crawls the Backlog API reference on developer.nulab.com and writes a
Postman Collection v2.1 file with one request per documented endpoint.

    backlog-postman --language en
    backlog-postman --language ja --output backlog_ja.json --skip-failed-pages
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from config import Language, ORDER_COMPLETION, ORDER_DISCOVERY, load_config, parse_language
from errors import ScraperError, SetupError
from postman import save_collection
from scraper import BacklogDocsScraper

logger = logging.getLogger(__name__)

LANGUAGE_CHOICES = list(Language)


def ask_language() -> Language:
    """Interactive language selection on stdin."""
    print("Select language")
    for number, language in enumerate(LANGUAGE_CHOICES, 1):
        print(f"  {number}) {language.value}")

    answer = input("> ").strip()
    if answer.isdigit() and 1 <= int(answer) <= len(LANGUAGE_CHOICES):
        return LANGUAGE_CHOICES[int(answer) - 1]
    return parse_language(answer)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Generate a Postman collection from the Backlog API documentation')
    parser.add_argument('--language', '-l', help="Documentation language: 'en' or 'ja' (prompted when omitted)")
    parser.add_argument('--output', '-o', help='Output file (default: backlog_api_postman_collection.json)')
    parser.add_argument('--concurrency', type=int, help='Maximum endpoint pages fetched at once (default: 8)')
    parser.add_argument('--timeout', type=float, help='Per-request timeout in seconds (default: 30)')
    parser.add_argument('--skip-failed-pages', action='store_true', default=None,
                        help='Log and skip endpoint pages that fail to download instead of aborting')
    parser.add_argument('--dedupe-links', action='store_true', default=None,
                        help='Scrape each endpoint page once even if the index links it several times')
    parser.add_argument('--order', choices=[ORDER_DISCOVERY, ORDER_COMPLETION],
                        help='Request order in the collection (default: discovery)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def resolve_language(value: Optional[str]) -> Language:
    if value:
        return parse_language(value)
    if os.getenv("BACKLOG_DOCS_LANGUAGE"):
        return parse_language(os.getenv("BACKLOG_DOCS_LANGUAGE"))
    if not sys.stdin.isatty():
        raise SetupError("no language selected (pass --language en|ja)")
    return ask_language()


async def run(args: argparse.Namespace, language: Language) -> int:
    config = load_config(
        language,
        output_path=args.output,
        max_concurrency=args.concurrency,
        request_timeout=args.timeout,
        skip_failed_pages=args.skip_failed_pages,
        dedupe_links=args.dedupe_links,
        order=args.order,
    )
    logger.info(f"🚀 Scraping {config.language.value} documentation at {config.root_url}")

    scraper = BacklogDocsScraper(config)
    collection = await scraper.run()
    save_collection(collection, config.output_path)

    if scraper.failed_urls:
        logger.warning(f"⚠️  {len(scraper.failed_urls)} endpoint pages were skipped:")
        for url in scraper.failed_urls:
            logger.warning(f"   {url}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    load_dotenv()

    try:
        language = resolve_language(args.language)
        return asyncio.run(run(args, language))
    except ScraperError as e:
        logger.error(f"❌ {e}")
        return 1
    except (KeyboardInterrupt, EOFError):
        logger.error("❌ Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
