#!/usr/bin/env python3
"""
Scraper configuration for the Backlog API documentation site.

Everything locale-dependent (root URL, link selector, section anchors) is
resolved once into an immutable ScraperConfig and handed to the client,
extractor and scraper explicitly.
"""

import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from dotenv import load_dotenv

from errors import SetupError

ALLOWED_DOMAIN = "developer.nulab.com"
URL_ANCHOR = "#url"
CONTENT_SELECTOR = "div.content"

COLLECTION_NAME = "Backlog API"
COLLECTION_SCHEMA = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"
DEFAULT_OUTPUT = "backlog_api_postman_collection.json"

DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_TIMEOUT = 30.0

ORDER_DISCOVERY = "discovery"
ORDER_COMPLETION = "completion"


class Language(str, Enum):
    EN = "English"
    JA = "Japanese"


@dataclass(frozen=True)
class SelectorSet:
    """Anchors of the headings that precede each section on an endpoint page."""
    method: str
    query_parameter: str
    request_parameter: str
    url_parameter: str


SELECTOR_SETS = {
    Language.EN: SelectorSet(
        method="#method",
        query_parameter="#query-parameters",
        request_parameter="#form-parameters",
        url_parameter="#url-parameters",
    ),
    Language.JA: SelectorSet(
        method="#メソッド",
        query_parameter="#クエリパラメーター",
        request_parameter="#リクエストパラメーター",
        url_parameter="#url-パラメーター",
    ),
}

ROOT_URLS = {
    Language.EN: "https://developer.nulab.com/docs/backlog",
    Language.JA: "https://developer.nulab.com/ja/docs/backlog",
}

LINK_SELECTORS = {
    Language.EN: "a[href^='/docs/backlog/api/2/']",
    Language.JA: "a[href^='/ja/docs/backlog/api/2/']",
}


@dataclass(frozen=True)
class ScraperConfig:
    language: Language
    root_url: str
    link_selector: str
    selectors: SelectorSet
    allowed_domain: str = ALLOWED_DOMAIN
    nav_selector: Optional[str] = None
    url_anchor: str = URL_ANCHOR
    content_selector: str = CONTENT_SELECTOR
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    request_timeout: float = DEFAULT_TIMEOUT
    skip_failed_pages: bool = False
    dedupe_links: bool = False
    order: str = ORDER_DISCOVERY
    output_path: str = DEFAULT_OUTPUT
    collection_name: str = COLLECTION_NAME


def parse_language(value: str) -> Language:
    """Accept 'en', 'ja', 'English', 'Japanese' (any case)."""
    normalized = (value or "").strip().lower()
    for language in Language:
        if normalized in (language.name.lower(), language.value.lower()):
            return language
    raise SetupError(f"unsupported language {value!r} (choose 'en' or 'ja')")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise SetupError(f"{name} must be a number, got {raw!r}") from e


def load_config(language: Optional[Language] = None, **overrides) -> ScraperConfig:
    """
    Resolve the run configuration.

    Precedence: explicit overrides (CLI flags), then BACKLOG_DOCS_* environment
    variables (a .env file is honoured), then module defaults.

    Raises:
        SetupError: no language given and none configured, or an invalid value
    """
    load_dotenv()

    if language is None:
        env_language = os.getenv("BACKLOG_DOCS_LANGUAGE")
        if not env_language:
            raise SetupError("no language selected")
        language = parse_language(env_language)

    config = ScraperConfig(
        language=language,
        root_url=ROOT_URLS[language],
        link_selector=LINK_SELECTORS[language],
        selectors=SELECTOR_SETS[language],
        nav_selector=os.getenv("BACKLOG_DOCS_NAV_SELECTOR") or None,
        max_concurrency=_env_number("BACKLOG_DOCS_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY, int),
        request_timeout=_env_number("BACKLOG_DOCS_TIMEOUT", DEFAULT_TIMEOUT, float),
        skip_failed_pages=_env_bool("BACKLOG_DOCS_SKIP_FAILED_PAGES", False),
        dedupe_links=_env_bool("BACKLOG_DOCS_DEDUPE_LINKS", False),
        order=os.getenv("BACKLOG_DOCS_ORDER") or ORDER_DISCOVERY,
        output_path=os.getenv("BACKLOG_DOCS_OUTPUT") or DEFAULT_OUTPUT,
    )

    overrides = {key: value for key, value in overrides.items() if value is not None}
    if overrides:
        config = replace(config, **overrides)

    if config.order not in (ORDER_DISCOVERY, ORDER_COMPLETION):
        raise SetupError(f"order must be '{ORDER_DISCOVERY}' or '{ORDER_COMPLETION}', got {config.order!r}")
    if config.max_concurrency < 1:
        raise SetupError("max concurrency must be at least 1")

    return config
