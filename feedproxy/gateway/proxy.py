"""
Forwarder for browser feed requests.

Validates the ``url`` parameter against the feed allowlist, performs a single
outbound GET bounded by a cancellation timer, and relays the upstream body
with permissive CORS headers.
"""

import asyncio
import json
import logging
import time
from typing import Optional

import httpx

from .allowlist import is_domain_allowed
from .errors import (
    DomainNotAllowed,
    ForwarderError,
    InvalidFeedURL,
    MissingParameter,
    UpstreamFetchFailure,
    UpstreamTimeout,
)
from .models import (
    CACHE_CONTROL,
    CORS_HEADERS,
    DEFAULT_CONTENT_TYPE,
    ForwarderSettings,
    ProxyResponse,
)
from ..monitoring.metrics import proxy_requests_total, upstream_fetch_duration

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT_MS = 15000

ABORTED_MESSAGE = "The operation was aborted"


class FeedForwarder:
    """Relays one allowlisted feed fetch per request."""

    def __init__(
        self,
        settings: Optional[ForwarderSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or ForwarderSettings()
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def start(self):
        """Open the shared outbound HTTP client."""
        if self._http_client is not None:
            return
        # No httpx timeout: the cancellation timer in fetch_with_timeout is
        # the only deadline.
        self._http_client = httpx.AsyncClient(
            timeout=None,
            follow_redirects=True,
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
            transport=self._transport,
        )
        logger.info("Feed forwarder started")

    async def stop(self):
        """Close the outbound HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.info("Feed forwarder stopped")

    async def handle(self, method: str, feed_url: Optional[str]) -> ProxyResponse:
        """Validate and relay a single feed request.

        Only OPTIONS is special-cased; every other method takes the fetch
        path, and the outbound request is always a GET.
        """
        if method.upper() == "OPTIONS":
            proxy_requests_total.labels(outcome="preflight").inc()
            return ProxyResponse(status_code=204, headers=dict(CORS_HEADERS))

        try:
            response = await self._forward(feed_url)
        except ForwarderError as e:
            return self._error_response(e)

        proxy_requests_total.labels(outcome="success").inc()
        return response

    async def fetch_with_timeout(
        self, url: str, timeout_ms: int = DEFAULT_FETCH_TIMEOUT_MS
    ) -> httpx.Response:
        """GET ``url``, cancelling the request if it outlives ``timeout_ms``.

        Raises ``asyncio.TimeoutError`` when the timer wins the race.
        """
        if not self._http_client:
            await self.start()

        return await asyncio.wait_for(
            self._http_client.get(url, headers=self.settings.outbound_headers()),
            timeout=timeout_ms / 1000,
        )

    async def _forward(self, feed_url: Optional[str]) -> ProxyResponse:
        if not feed_url:
            proxy_requests_total.labels(outcome="missing_url").inc()
            raise MissingParameter()

        host = self._parse_feed_host(feed_url)

        if not is_domain_allowed(host):
            logger.warning("Blocked feed request to %s", host)
            proxy_requests_total.labels(outcome="blocked").inc()
            raise DomainNotAllowed(host)

        timeout_ms = self.settings.timeout_ms_for(feed_url)
        start_time = time.time()

        try:
            upstream = await self.fetch_with_timeout(feed_url, timeout_ms)
        except asyncio.TimeoutError as e:
            upstream_fetch_duration.labels(outcome="timeout").observe(
                time.time() - start_time
            )
            raise self._upstream_failure(
                UpstreamTimeout(str(e) or ABORTED_MESSAGE, feed_url)
            ) from e
        except Exception as e:  # noqa: BLE001
            upstream_fetch_duration.labels(outcome="failed").observe(
                time.time() - start_time
            )
            raise self._upstream_failure(
                UpstreamFetchFailure(str(e) or type(e).__name__, feed_url)
            ) from e

        upstream_fetch_duration.labels(outcome="success").observe(
            time.time() - start_time
        )
        logger.debug(
            "Fetched %s (%s, %d bytes)",
            feed_url,
            upstream.status_code,
            len(upstream.content),
        )

        headers = {
            "Content-Type": upstream.headers.get("content-type") or DEFAULT_CONTENT_TYPE,
            "Cache-Control": CACHE_CONTROL,
            **CORS_HEADERS,
        }
        return ProxyResponse(
            status_code=upstream.status_code,
            headers=headers,
            body=upstream.content,
        )

    def _parse_feed_host(self, feed_url: str) -> str:
        # Reading .host decodes IDNA labels, which raises UnicodeError on
        # malformed A-labels such as "xn--".
        try:
            target = httpx.URL(feed_url)
            host = target.host
        except (httpx.InvalidURL, ValueError) as e:
            raise self._upstream_failure(
                InvalidFeedURL(str(e) or "Invalid URL", feed_url)
            ) from e

        if not target.is_absolute_url or not host:
            raise self._upstream_failure(InvalidFeedURL("Invalid URL", feed_url))
        return host

    def _upstream_failure(self, error: UpstreamFetchFailure | UpstreamTimeout):
        logger.error("RSS proxy error: %s %s", error.url, error.details)
        outcome = "timeout" if isinstance(error, UpstreamTimeout) else "failed"
        proxy_requests_total.labels(outcome=outcome).inc()
        return error

    def _error_response(self, error: ForwarderError) -> ProxyResponse:
        headers = {"Content-Type": "application/json", **CORS_HEADERS}
        body = json.dumps(error.to_body(), separators=(",", ":"), ensure_ascii=False)
        return ProxyResponse(
            status_code=error.status_code,
            headers=headers,
            body=body.encode("utf-8"),
        )
