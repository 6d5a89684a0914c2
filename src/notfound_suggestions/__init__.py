"""Deferred suggestion jobs for requests that matched no page."""

__version__ = "0.1.0"

__all__ = ["__version__"]
