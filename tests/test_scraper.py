"""End-to-end tests of the crawl against a fake documentation site."""

from dataclasses import replace

import pytest

from client import DocsClient
from errors import EndpointFetchError, FetchError, IndexFetchError
from scraper import BacklogDocsScraper

from conftest import ADD_ISSUE_HTML, GET_ISSUE_HTML, INDEX_URL, endpoint_html, index_html, site_transport

SITE = "https://developer.nulab.com"


def _page(slug: str) -> str:
    return f"{SITE}/docs/backlog/api/2/{slug}"


@pytest.mark.asyncio
async def test_get_issue_scenario(en_config):
    transport = site_transport({
        INDEX_URL: index_html("/docs/backlog/api/2/get-issue"),
        _page("get-issue"): GET_ISSUE_HTML,
    })

    collection = await BacklogDocsScraper(en_config, transport=transport).run()

    assert len(collection.item) == 1
    item = collection.item[0]
    assert item.name == "Get Issue"
    assert item.request.description == "Returns issue detail."
    assert item.request.method == "GET"
    assert item.request.url.raw == "/api/v2/issues/:issueIdOrKey"
    assert item.request.url.path == ["api", "v2", "issues", ":issueIdOrKey"]
    assert item.request.url.variable == []
    assert [(q.key, q.value, q.description) for q in item.request.url.query] == [
        ("count", "<number>", "Max results (optional)")
    ]


@pytest.mark.asyncio
async def test_every_discovered_link_becomes_one_item(en_config):
    slugs = [f"endpoint-{i}" for i in range(25)]
    pages = {INDEX_URL: index_html(*(f"/docs/backlog/api/2/{s}" for s in slugs))}
    pages.update({_page(s): endpoint_html(s) for s in slugs})

    config = replace(en_config, max_concurrency=4)
    collection = await BacklogDocsScraper(config, transport=site_transport(pages)).run()

    assert [item.name for item in collection.item] == slugs


@pytest.mark.asyncio
async def test_only_endpoint_links_on_allowed_domain_are_followed(en_config):
    seen = []
    transport = site_transport({
        INDEX_URL: index_html(
            "/docs/backlog/api/2/add-issue",
            "/docs/backlog/auth",
            "https://example.com/docs/backlog/api/2/evil",
            "/docs/backlog/api/2/add-issue#form-parameters",
        ),
        _page("add-issue"): ADD_ISSUE_HTML,
    }, seen=seen)

    collection = await BacklogDocsScraper(en_config, transport=transport).run()

    assert seen == [INDEX_URL, _page("add-issue"), _page("add-issue")]
    assert [item.name for item in collection.item] == ["Add Issue", "Add Issue"]
    assert [p.key for p in collection.item[0].request.body.urlencoded] == ["projectId", "summary", "description"]


def test_off_domain_links_are_dropped(en_config):
    scraper = BacklogDocsScraper(replace(en_config, nav_selector="nav"))
    html = '<nav><a href="/docs/backlog/api/2/get-space">a</a><a href="//evil.example/docs/backlog/api/2/x">b</a></nav>'
    assert scraper.parse_endpoint_links(html, INDEX_URL) == [_page("get-space")]


def test_nav_container_discovery(en_config):
    config = replace(en_config, nav_selector="nav.api-menu")
    html = """
    <nav class="api-menu"><a href="/docs/backlog/api/2/get-space">Get Space</a>
      <a href="get-issue">Relative</a></nav>
    <footer><a href="/docs/backlog/api/2/footer-link">Footer</a></footer>
    """
    links = BacklogDocsScraper(config).parse_endpoint_links(html, f"{SITE}/docs/backlog/api/2/")
    assert links == [_page("get-space"), _page("get-issue")]


@pytest.mark.asyncio
async def test_duplicate_links_kept_unless_deduped(en_config):
    pages = {
        INDEX_URL: index_html("/docs/backlog/api/2/get-space", "/docs/backlog/api/2/get-space"),
        _page("get-space"): endpoint_html("Get Space"),
    }

    collection = await BacklogDocsScraper(en_config, transport=site_transport(pages)).run()
    assert len(collection.item) == 2

    config = replace(en_config, dedupe_links=True)
    collection = await BacklogDocsScraper(config, transport=site_transport(pages)).run()
    assert len(collection.item) == 1


@pytest.mark.asyncio
async def test_index_failure_is_fatal(en_config):
    transport = site_transport({}, failures={INDEX_URL: 503})
    scraper = BacklogDocsScraper(en_config, transport=transport)

    with pytest.raises(IndexFetchError) as exc_info:
        await scraper.run()
    assert str(exc_info.value).startswith("index fetch failed:")
    assert "503" in str(exc_info.value)


@pytest.mark.asyncio
async def test_endpoint_failure_is_fatal_by_default(en_config):
    pages = {
        INDEX_URL: index_html("/docs/backlog/api/2/ok", "/docs/backlog/api/2/broken"),
        _page("ok"): endpoint_html("OK"),
    }
    transport = site_transport(pages, failures={_page("broken"): 500})

    with pytest.raises(EndpointFetchError) as exc_info:
        await BacklogDocsScraper(en_config, transport=transport).run()
    assert exc_info.value.url == _page("broken")
    assert str(exc_info.value).startswith("endpoint fetch failed:")


@pytest.mark.asyncio
async def test_endpoint_failure_skipped_when_configured(en_config):
    pages = {
        INDEX_URL: index_html("/docs/backlog/api/2/ok", "/docs/backlog/api/2/missing"),
        _page("ok"): endpoint_html("OK"),
    }
    config = replace(en_config, skip_failed_pages=True)
    scraper = BacklogDocsScraper(config, transport=site_transport(pages))

    collection = await scraper.run()

    assert [item.name for item in collection.item] == ["OK"]
    assert scraper.failed_urls == [_page("missing")]


@pytest.mark.asyncio
async def test_japanese_site(ja_config):
    ja_index = "https://developer.nulab.com/ja/docs/backlog"
    page = f"{SITE}/ja/docs/backlog/api/2/get-issue"
    html = """
    <div class="content"><h1>課題情報の取得</h1><p>課題情報を取得します。</p>
      <h2 id="メソッド">メソッド</h2><pre>GET</pre>
      <h2 id="url">URL</h2><pre>/api/v2/issues/:issueIdOrKey</pre></div>
    """
    transport = site_transport({
        ja_index: index_html("/ja/docs/backlog/api/2/get-issue", "/docs/backlog/api/2/get-issue"),
        page: html,
    })

    collection = await BacklogDocsScraper(ja_config, transport=transport).run()

    assert [(i.name, i.request.method) for i in collection.item] == [("課題情報の取得", "GET")]


@pytest.mark.asyncio
async def test_client_refuses_other_domains(en_config):
    async with DocsClient(en_config, transport=site_transport({})) as client:
        with pytest.raises(FetchError):
            await client.fetch_page("https://example.com/docs/backlog")


@pytest.mark.asyncio
async def test_redirect_off_domain_is_not_followed(en_config):
    seen = []
    transport = site_transport(
        {INDEX_URL: index_html("/docs/backlog/api/2/moved")},
        redirects={_page("moved"): "https://evil.example.com/x"},
        seen=seen,
    )

    with pytest.raises(EndpointFetchError) as exc_info:
        await BacklogDocsScraper(en_config, transport=transport).run()

    assert "https://evil.example.com/x" not in seen
    assert exc_info.value.url == _page("moved")


@pytest.mark.asyncio
async def test_redirect_off_domain_is_skipped_when_configured(en_config):
    seen = []
    transport = site_transport(
        {INDEX_URL: index_html("/docs/backlog/api/2/moved", "/docs/backlog/api/2/get-issue"),
         _page("get-issue"): GET_ISSUE_HTML},
        redirects={_page("moved"): "https://evil.example.com/x"},
        seen=seen,
    )
    scraper = BacklogDocsScraper(replace(en_config, skip_failed_pages=True), transport=transport)

    collection = await scraper.run()

    assert [item.name for item in collection.item] == ["Get Issue"]
    assert scraper.failed_urls == [_page("moved")]
    assert "https://evil.example.com/x" not in seen


@pytest.mark.asyncio
async def test_redirect_on_domain_is_followed(en_config):
    seen = []
    transport = site_transport(
        {_page("get-issue"): GET_ISSUE_HTML},
        redirects={_page("old-get-issue"): "/docs/backlog/api/2/get-issue"},
        seen=seen,
    )

    async with DocsClient(en_config, transport=transport) as client:
        html = await client.fetch_page(_page("old-get-issue"))

    assert "Get Issue" in html
    assert seen == [_page("old-get-issue"), _page("get-issue")]


@pytest.mark.asyncio
async def test_redirect_loop_is_a_fetch_error(en_config):
    transport = site_transport({}, redirects={_page("loop"): _page("loop")})

    async with DocsClient(en_config, transport=transport) as client:
        with pytest.raises(FetchError) as exc_info:
            await client.fetch_page(_page("loop"))
    assert "redirects" in str(exc_info.value)
