"""HTTP middleware for the API process."""

from src.hubsheets.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
