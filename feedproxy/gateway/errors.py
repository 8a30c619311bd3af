"""
Errors raised while validating or forwarding a feed request.

Every error is terminal for the request and maps to one JSON error body.
"""

from typing import Any, Dict, Optional


class ForwarderError(Exception):
    """Base class for errors reported to the caller as a JSON body."""

    status_code: int = 500
    error: str = "Internal error"

    def __init__(self, details: Optional[str] = None):
        super().__init__(details or self.error)
        self.details = details

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.error}


class MissingParameter(ForwarderError):
    status_code = 400
    error = "Missing url parameter"


class DomainNotAllowed(ForwarderError):
    status_code = 403
    error = "Domain not allowed"

    def __init__(self, domain: str):
        super().__init__(f"Domain {domain} is not in the allowlist")
        self.domain = domain

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.error, "domain": self.domain}


class _UpstreamError(ForwarderError):
    def __init__(self, details: str, url: str):
        super().__init__(details)
        self.url = url

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.error, "details": self.details, "url": self.url}


class UpstreamTimeout(_UpstreamError):
    status_code = 504
    error = "Feed timeout"


class UpstreamFetchFailure(_UpstreamError):
    status_code = 502
    error = "Failed to fetch feed"


class InvalidFeedURL(UpstreamFetchFailure):
    """The ``url`` parameter is not an absolute URL.

    Reported exactly like a network failure; callers cannot tell the two apart.
    """
