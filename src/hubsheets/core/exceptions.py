"""Typed failures raised by the extraction pipeline and its collaborators.

- TransportError: a HubSpot or Google Sheets call failed (HTTP status or I/O).
- JoinError: a cross-reference could not be resolved (deal -> pipeline/stage,
  contact detail -> originating summary).
- UrlParseError: a URL could not be split into query parameters. Only raised
  inside the URL helpers, which always recover to an empty parameter map.
"""

from __future__ import annotations

from typing import Any


class PipelineError(Exception):
    """Base class for every error raised by the pipeline.

    Attributes:
        message: Human-readable description.
        details: Extra structured context, safe to log or return in an API body.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class TransportError(PipelineError):
    """Raised when a collaborator call fails.

    Attributes:
        operation: Collaborator operation name (e.g. "fetch_deal").
        status_code: HTTP status when the remote answered, None on I/O failure.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        super().__init__(
            f"{operation} failed: {message}",
            details={"operation": operation, "status_code": status_code},
        )


class JoinError(PipelineError):
    """Raised when a referenced id is missing from the record it is joined against.

    Attributes:
        entity: What was being looked up ("pipeline", "stage", "summary").
        reference: The id that could not be found.
    """

    def __init__(self, entity: str, reference: Any, context: str = "") -> None:
        self.entity = entity
        self.reference = reference
        suffix = f" ({context})" if context else ""
        super().__init__(
            f"No {entity} found for id {reference!r}{suffix}",
            details={"entity": entity, "reference": reference},
        )


class UrlParseError(PipelineError):
    """Raised when a URL is relative or malformed."""
