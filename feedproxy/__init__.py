"""Allowlisted RSS/Atom feed proxy for browser clients."""

__version__ = "1.0.0"
