"""Tests for the page loader."""

import httpx
import pytest

from conftest import GOOD_HTML, run
from webperf.exceptions import PageLoadError
from webperf.services.page_loader import PageLoader, parse_html


def loader_for(handler, **kwargs) -> PageLoader:
    return PageLoader(transport=httpx.MockTransport(handler), **kwargs)


def test_load_success():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            html=GOOD_HTML,
            headers={"X-Frame-Options": "DENY"},
        )

    page = run(loader_for(handler).load("https://example.com/", allow_js=True))

    assert page.document.find("h1").get_text() == "Example"
    assert page.headers["x-frame-options"] == "DENY"
    assert page.headers["content-type"].startswith("text/html")
    assert page.is_https
    assert "webperf" in seen[0].headers["user-agent"].lower()


def test_follows_redirects():
    def handler(request):
        if request.url.scheme == "http":
            return httpx.Response(301, headers={"Location": "https://example.com/new"})
        return httpx.Response(200, html="<p>new</p>")

    page = run(loader_for(handler).load("http://example.com/old"))
    assert page.url == "http://example.com/old"
    assert page.final_url == "https://example.com/new"
    # Served over HTTPS once the redirect is followed
    assert page.is_https


def test_non_2xx_raises_with_status():
    loader = loader_for(lambda request: httpx.Response(404))
    with pytest.raises(PageLoadError) as exc:
        run(loader.load("https://example.com/missing"))
    assert exc.value.status_code == 404
    assert "HTTP 404" in str(exc.value)


def test_oversize_body():
    loader = loader_for(lambda request: httpx.Response(200, html="x" * 2048))
    with pytest.raises(PageLoadError, match="exceeds limit of 1024 bytes"):
        run(loader.load("https://example.com/", max_size=1024))


def test_timeout_without_retries():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(PageLoadError, match="HTTP timeout"):
        run(loader_for(handler, max_retries=0).load("https://example.com/"))


def test_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(PageLoadError, match="connection refused") as exc:
        run(loader_for(handler).load("https://example.com/"))
    assert exc.value.status_code is None


def test_rate_limited_then_retried():
    responses = [
        httpx.Response(429, headers={"Retry-After": "0"}),
        httpx.Response(200, html="<p>ok</p>"),
    ]
    loader = loader_for(lambda request: responses.pop(0), max_retries=1)

    page = run(loader.load("https://example.com/"))
    assert page.document.get_text() == "ok"
    assert responses == []


def test_parse_html_does_not_touch_network():
    page = parse_html("<title>t</title>", "http://example.com/")
    assert not page.is_https
    assert page.final_url == "http://example.com/"
    assert page.headers == {}


def test_invalid_url_raises_page_load_error():
    def handler(request):
        raise AssertionError("no request should be sent")

    with pytest.raises(PageLoadError, match="Invalid URL") as exc:
        run(loader_for(handler, max_retries=0).load("http://exa\x01mple.com/"))
    assert exc.value.url == "http://exa\x01mple.com/"
