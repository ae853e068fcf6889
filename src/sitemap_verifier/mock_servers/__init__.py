"""Mock website for integration testing."""

from .app import create_app, create_mock_site

__all__ = ["create_app", "create_mock_site"]
