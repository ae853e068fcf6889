"""Concurrent reachability and health checks for sitemap URLs."""

__version__ = "1.0.0"
