#!/usr/bin/env python3
"""
HTML Field Extractor for Backlog API documentation pages.

Pulls name, description, HTTP method, URL and the three parameter tables
out of one endpoint page. The pages are only loosely structured, so every
field is located by adjacency to a heading:

    <h2 id="method">Method</h2>   <pre>GET</pre>
    <h2 id="url">URL</h2>         <pre>/api/v2/issues/:issueIdOrKey</pre>
    <h2 id="query-parameters">..</h2>  <table>...</table>
    <h2 id="form-parameters">..</h2>   <pre>Content-Type: ...</pre> <table>...</table>

Where a page revision is known to be laid out differently, the field is
read through an ordered list of strategies (first non-empty result wins).
Nothing here raises on missing markup: an absent heading or table gives
"" or [] for that field.
"""

import logging
import re
from typing import Callable, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from config import ScraperConfig, SelectorSet, URL_ANCHOR
from models import ExtractedFields, Parameter
from utils.table_parser import parse_parameter_table

logger = logging.getLogger(__name__)

Strategy = Callable[[], str]

REQUEST_LINE_PATTERN = re.compile(r'^\s*(\S+)[ \t]+(\S.*?)\s*$')


def first_non_empty(strategies: Iterable[Strategy]) -> str:
    """
    Run strategies in order and return the first non-empty (stripped) result.

    Returns "" when every strategy comes up empty.
    """
    for strategy in strategies:
        value = (strategy() or "").strip()
        if value:
            return value
    return ""


def _text(element: Optional[Tag]) -> str:
    return element.get_text().strip() if element is not None else ""


def _next_element_sibling(element: Optional[Tag]) -> Optional[Tag]:
    if element is None:
        return None
    return element.find_next_sibling()


def adjacent(anchor: Optional[Tag], *names: str) -> Optional[Tag]:
    """
    Follow a chain of immediately-adjacent siblings, like CSS "a + b + c".

    adjacent(h2, "pre", "table") returns the <table> only when the element
    right after h2 is a <pre> and the element right after that is a <table>.
    """
    current = anchor
    for name in names:
        current = _next_element_sibling(current)
        if current is None or current.name != name:
            return None
    return current


def split_request_line(text: str) -> Tuple[str, str]:
    """
    'GET /api/v2/space' -> ('GET', '/api/v2/space'); anything else -> ('', '')

    Only the first non-blank line is read; header lines below it are ignored.
    """
    first_line = next((line for line in (text or "").splitlines() if line.strip()), "")
    match = REQUEST_LINE_PATTERN.match(first_line)
    if not match:
        return "", ""
    return match.group(1), match.group(2)


class EndpointPageExtractor:
    """Extracts the fields of one endpoint page using a locale's SelectorSet"""

    def __init__(self, selectors: SelectorSet, url_anchor: str = URL_ANCHOR,
                 content_selector: Optional[str] = None):
        self.selectors = selectors
        self.url_anchor = url_anchor
        self.content_selector = content_selector

    @classmethod
    def from_config(cls, config: ScraperConfig) -> "EndpointPageExtractor":
        return cls(config.selectors, config.url_anchor, config.content_selector)

    def content_root(self, soup: BeautifulSoup) -> Tag:
        """The page's main content container, or the whole document."""
        if self.content_selector:
            root = soup.select_one(self.content_selector)
            if root is not None:
                return root
        return soup

    def extract(self, soup: BeautifulSoup) -> ExtractedFields:
        root = self.content_root(soup)
        method, url = self.find_request(root)
        return ExtractedFields(
            name=self.find_name(root),
            description=self.find_description(root),
            method=method,
            url=url,
            query_params=self.find_query(root),
            path_params=self.find_variables(root),
            body_params=self.find_body(root),
        )

    def extract_html(self, html: str) -> ExtractedFields:
        return self.extract(BeautifulSoup(html, 'html.parser'))

    # name / description

    def find_name(self, root: Tag) -> str:
        # Some pages have no <h1> and start directly at <h2>
        return first_non_empty([
            lambda: _text(root.find('h1')),
            lambda: _text(root.find('h2')),
        ])

    def find_description(self, root: Tag) -> str:
        return first_non_empty([
            lambda: _text(adjacent(root.find('h1'), 'p')),
            lambda: _text(adjacent(root.find('h2'), 'p')),
        ])

    # method / URL

    def _anchor(self, root: Tag, selector: str) -> Optional[Tag]:
        """Heading for an anchor selector such as "#method"."""
        anchor_id = selector[1:] if selector.startswith('#') else selector
        return root.find(id=anchor_id)

    def find_method(self, root: Tag) -> str:
        return _text(adjacent(self._anchor(root, self.selectors.method), 'pre'))

    def find_url(self, root: Tag) -> str:
        return _text(adjacent(self._anchor(root, self.url_anchor), 'pre'))

    def find_request_line(self, root: Tag) -> Tuple[str, str]:
        """Older layout: first <pre> holds "<METHOD> <URL>"."""
        return split_request_line(_text(root.find('pre')))

    def find_request(self, root: Tag) -> Tuple[str, str]:
        """
        Method and URL, anchored headings first, single request line second.

        The request line is only consulted when the anchored form yields
        nothing at all, so the two layouts are never mixed on one page.
        """
        method = self.find_method(root)
        url = self.find_url(root)
        if method or url:
            return method, url

        method, url = self.find_request_line(root)
        if method and url.startswith('/'):
            return method, url
        return "", ""

    # parameter tables

    def find_query(self, root: Tag) -> List[Parameter]:
        anchor = self._anchor(root, self.selectors.query_parameter)
        return parse_parameter_table(adjacent(anchor, 'table'))

    def find_variables(self, root: Tag) -> List[Parameter]:
        anchor = self._anchor(root, self.selectors.url_parameter)
        return parse_parameter_table(adjacent(anchor, 'table'))

    def find_body(self, root: Tag) -> List[Parameter]:
        # Form parameter tables come after a sample payload block
        anchor = self._anchor(root, self.selectors.request_parameter)
        return parse_parameter_table(adjacent(anchor, 'pre', 'table'))
