"""
Feed gateway: allowlisted forwarding of RSS/Atom feeds to browser clients.

This module provides:
- Fixed domain allowlist for feed hosts
- Outbound fetch with a cancellation timer
- Structured JSON errors with CORS headers
"""

from .allowlist import ALLOWED_DOMAINS, is_domain_allowed
from .errors import (
    ForwarderError,
    MissingParameter,
    DomainNotAllowed,
    UpstreamTimeout,
    UpstreamFetchFailure,
    InvalidFeedURL,
)
from .models import ForwarderSettings, ProxyResponse
from .proxy import FeedForwarder

__all__ = [
    "ALLOWED_DOMAINS",
    "is_domain_allowed",
    "ForwarderError",
    "MissingParameter",
    "DomainNotAllowed",
    "UpstreamTimeout",
    "UpstreamFetchFailure",
    "InvalidFeedURL",
    "ForwarderSettings",
    "ProxyResponse",
    "FeedForwarder",
]
