"""
Gateway data models for feed forwarding.
"""

from typing import Dict

from pydantic import BaseModel, Field

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

CACHE_CONTROL = "public, max-age=600, s-maxage=600, stale-while-revalidate=300"

DEFAULT_CONTENT_TYPE = "application/xml"

FEED_ACCEPT = "application/rss+xml, application/xml, text/xml, */*"
FEED_ACCEPT_LANGUAGE = "en-US,en;q=0.9"

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ForwarderSettings(BaseModel):
    """Timeouts and outbound identity used by the forwarder."""

    default_timeout_ms: int = 12000
    google_news_timeout_ms: int = 20000
    google_news_marker: str = "news.google.com"
    user_agent: str = BROWSER_USER_AGENT

    def timeout_ms_for(self, url: str) -> int:
        # Keyed on the raw URL text, not the parsed host.
        if self.google_news_marker in url:
            return self.google_news_timeout_ms
        return self.default_timeout_ms

    def outbound_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": FEED_ACCEPT,
            "Accept-Language": FEED_ACCEPT_LANGUAGE,
        }


class ProxyResponse(BaseModel):
    """Response relayed back to the browser client."""

    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    body: bytes = b""
