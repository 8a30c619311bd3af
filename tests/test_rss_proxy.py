import asyncio

import httpx
from fastapi.testclient import TestClient

from feedproxy.gateway.models import ForwarderSettings
from feedproxy.main import create_app

BBC_FEED = "https://feeds.bbci.co.uk/news/rss.xml"
GOOGLE_NEWS_FEED = "https://news.google.com/rss/search?q=climate"

CORS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, OPTIONS",
    "access-control-allow-headers": "Content-Type",
}


def _client(handler, settings=None) -> TestClient:
    app = create_app(settings=settings, transport=httpx.MockTransport(handler))
    return TestClient(app)


def _assert_cors(resp):
    for key, value in CORS.items():
        assert resp.headers.get(key) == value


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected upstream call to {request.url}")


def test_preflight_returns_204_without_body():
    with _client(_unreachable) as client:
        for query in ("", "?url=https://evil.example.com/feed", f"?url={BBC_FEED}"):
            resp = client.options(f"/api/rss-proxy{query}")
            assert resp.status_code == 204
            assert resp.content == b""
            _assert_cors(resp)


def test_missing_url_returns_400():
    with _client(_unreachable) as client:
        for path in ("/api/rss-proxy", "/api/rss-proxy?url="):
            resp = client.get(path)
            assert resp.status_code == 400
            assert resp.json() == {"error": "Missing url parameter"}
            assert resp.headers["content-type"] == "application/json"
            _assert_cors(resp)


def test_unlisted_domain_returns_403():
    with _client(_unreachable) as client:
        resp = client.get(
            "/api/rss-proxy", params={"url": "https://evil.example.com/feed"}
        )
    assert resp.status_code == 403
    assert resp.json() == {"error": "Domain not allowed", "domain": "evil.example.com"}
    _assert_cors(resp)


def test_allowed_feed_is_relayed_verbatim():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["headers"] = request.headers
        return httpx.Response(200, content=b"<rss/>")

    with _client(handler) as client:
        resp = client.get("/api/rss-proxy", params={"url": BBC_FEED})

    assert resp.status_code == 200
    assert resp.content == b"<rss/>"
    assert resp.headers["content-type"] == "application/xml"
    assert "max-age=600" in resp.headers["cache-control"]
    assert resp.headers["cache-control"] == (
        "public, max-age=600, s-maxage=600, stale-while-revalidate=300"
    )
    _assert_cors(resp)

    assert seen["method"] == "GET"
    assert seen["headers"]["accept"] == "application/rss+xml, application/xml, text/xml, */*"
    assert seen["headers"]["accept-language"] == "en-US,en;q=0.9"
    assert seen["headers"]["user-agent"].startswith("Mozilla/5.0")


def test_upstream_status_and_content_type_are_propagated():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404,
            content=b"<html>gone</html>",
            headers={"Content-Type": "text/html; charset=ISO-8859-1"},
        )

    with _client(handler) as client:
        resp = client.get("/api/rss-proxy", params={"url": BBC_FEED})

    assert resp.status_code == 404
    assert resp.content == b"<html>gone</html>"
    assert resp.headers["content-type"] == "text/html; charset=ISO-8859-1"
    assert "cache-control" in resp.headers


def test_redirects_are_followed():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/news/rss.xml":
            return httpx.Response(
                301, headers={"Location": "https://feeds.bbci.co.uk/news/world/rss.xml"}
            )
        return httpx.Response(
            200, content=b"<rss>world</rss>", headers={"Content-Type": "text/xml"}
        )

    with _client(handler) as client:
        resp = client.get("/api/rss-proxy", params={"url": BBC_FEED})

    assert resp.status_code == 200
    assert resp.content == b"<rss>world</rss>"
    assert resp.headers["content-type"] == "text/xml"


def test_slow_feed_returns_504():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200, content=b"<rss/>")

    settings = ForwarderSettings(default_timeout_ms=50, google_news_timeout_ms=50)
    with _client(handler, settings) as client:
        resp = client.get("/api/rss-proxy", params={"url": BBC_FEED})

    assert resp.status_code == 504
    body = resp.json()
    assert body["error"] == "Feed timeout"
    assert body["url"] == BBC_FEED
    assert body["details"] == "The operation was aborted"
    assert resp.headers["content-type"] == "application/json"
    assert "cache-control" not in resp.headers
    _assert_cors(resp)


def test_google_news_gets_the_longer_timeout():
    # Scaled down: default window 50 ms, Google News window 1000 ms,
    # upstream answers after 200 ms.
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0.2)
        return httpx.Response(200, content=b"<rss/>")

    settings = ForwarderSettings(default_timeout_ms=50, google_news_timeout_ms=1000)
    with _client(handler, settings) as client:
        google = client.get("/api/rss-proxy", params={"url": GOOGLE_NEWS_FEED})
        other = client.get("/api/rss-proxy", params={"url": BBC_FEED})

    assert google.status_code == 200
    assert google.content == b"<rss/>"
    assert other.status_code == 504
    assert other.json()["error"] == "Feed timeout"


def test_network_error_returns_502():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    with _client(handler) as client:
        resp = client.get("/api/rss-proxy", params={"url": BBC_FEED})

    assert resp.status_code == 502
    assert resp.json() == {
        "error": "Failed to fetch feed",
        "details": "Connection refused",
        "url": BBC_FEED,
    }
    _assert_cors(resp)


def test_malformed_url_is_reported_as_fetch_failure():
    with _client(_unreachable) as client:
        for bad in ("not a url", "https://xn--/x", "https:feeds.bbci.co.uk/x"):
            resp = client.get("/api/rss-proxy", params={"url": bad})

            assert resp.status_code == 502
            body = resp.json()
            assert body["error"] == "Failed to fetch feed"
            assert body["url"] == bad
            assert body["details"]
            assert resp.headers["content-type"] == "application/json"
            _assert_cors(resp)


def test_percent_encoded_host_is_not_decoded():
    with _client(_unreachable) as client:
        resp = client.get(
            "/api/rss-proxy", params={"url": "https://%66eeds.bbci.co.uk/x"}
        )

    assert resp.status_code == 403
    assert resp.json()["domain"] == "%66eeds.bbci.co.uk"
    _assert_cors(resp)


def test_repeated_requests_yield_identical_responses():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, content=b"<rss>same</rss>", headers={"Content-Type": "application/rss+xml"}
        )

    with _client(handler) as client:
        first = client.get("/api/rss-proxy", params={"url": BBC_FEED})
        second = client.get("/api/rss-proxy", params={"url": BBC_FEED})

    assert first.status_code == second.status_code == 200
    assert first.content == second.content == b"<rss>same</rss>"
    assert first.headers["content-type"] == second.headers["content-type"]


def test_other_methods_fall_through_to_fetch():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.method)
        return httpx.Response(200, content=b"<rss/>")

    with _client(handler) as client:
        resp = client.post(f"/api/rss-proxy?url={BBC_FEED}")
        missing = client.delete("/api/rss-proxy")

    assert resp.status_code == 200
    assert resp.content == b"<rss/>"
    assert seen == ["GET"]
    assert missing.status_code == 400
