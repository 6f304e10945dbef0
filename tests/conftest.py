"""Shared fixtures: sample documentation pages and a fake documentation site."""

import httpx
import pytest

from config import Language, load_config

INDEX_URL = "https://developer.nulab.com/docs/backlog"

GET_ISSUE_HTML = """
<html><body>
<div class="content">
  <h1 id="get-issue">Get Issue</h1>
  <p>Returns issue detail.</p>
  <h2 id="method">Method</h2>
  <pre>GET</pre>
  <h2 id="url">URL</h2>
  <pre>/api/v2/issues/:issueIdOrKey</pre>
  <h2 id="query-parameters">Query Parameters</h2>
  <table>
    <thead><tr><th>Parameter Name</th><th>Type</th><th>Description</th></tr></thead>
    <tbody>
      <tr><td>count (optional)</td><td>number</td><td>Max results</td></tr>
    </tbody>
  </table>
</div>
</body></html>
"""

ADD_ISSUE_HTML = """
<html><body>
<div class="content">
  <h1>Add Issue</h1>
  <p>Adds new issue.</p>
  <h2 id="method">Method</h2>
  <pre>POST</pre>
  <h2 id="url">URL</h2>
  <pre>/api/v2/issues</pre>
  <h2 id="form-parameters">Form Parameters</h2>
  <pre>Content-Type:application/x-www-form-urlencoded</pre>
  <table>
    <thead><tr><th>Parameter Name</th><th>Type</th><th>Description</th></tr></thead>
    <tbody>
      <tr><td>projectId (Required)</td><td>Number</td><td>Project ID</td></tr>
      <tr><td>summary (Required)</td><td>String</td><td>Summary</td></tr>
      <tr><td>description</td><td>String</td><td>Description</td></tr>
    </tbody>
  </table>
</div>
</body></html>
"""


def index_html(*hrefs: str) -> str:
    links = "\n".join(f'<li><a href="{href}">{href}</a></li>' for href in hrefs)
    return f"<html><body><nav><ul>{links}</ul></nav></body></html>"


def endpoint_html(name: str, method: str = "GET", url: str = "/api/v2/space") -> str:
    return f"""
    <html><body><div class="content">
      <h1>{name}</h1>
      <p>{name} description.</p>
      <h2 id="method">Method</h2><pre>{method}</pre>
      <h2 id="url">URL</h2><pre>{url}</pre>
    </div></body></html>
    """


def site_transport(pages: dict, failures: dict = None, seen: list = None, redirects: dict = None) -> httpx.MockTransport:
    """
    Fake documentation site.

    Args:
        pages: absolute URL -> HTML body
        failures: absolute URL -> HTTP status to answer with
        redirects: absolute URL -> Location to answer a 302 with
        seen: optional list receiving every requested URL
    """
    failures = failures or {}
    redirects = redirects or {}

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if seen is not None:
            seen.append(url)
        if url in redirects:
            return httpx.Response(302, headers={"Location": redirects[url]})
        if url in failures:
            return httpx.Response(failures[url], text="error")
        if url in pages:
            return httpx.Response(200, text=pages[url], headers={"content-type": "text/html"})
        return httpx.Response(404, text="not found")

    return httpx.MockTransport(handler)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "BACKLOG_DOCS_LANGUAGE",
        "BACKLOG_DOCS_NAV_SELECTOR",
        "BACKLOG_DOCS_MAX_CONCURRENCY",
        "BACKLOG_DOCS_TIMEOUT",
        "BACKLOG_DOCS_SKIP_FAILED_PAGES",
        "BACKLOG_DOCS_DEDUPE_LINKS",
        "BACKLOG_DOCS_ORDER",
        "BACKLOG_DOCS_OUTPUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def en_config():
    return load_config(Language.EN)


@pytest.fixture
def ja_config():
    return load_config(Language.JA)
