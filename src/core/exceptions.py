"""Domain exceptions for the assistant and the financial dataset.

`AssistantError` subclasses carry a stable `error_code` so the API layer and
the streaming loop can map them to HTTP responses and SSE error events without
string matching.
"""

from __future__ import annotations

from dataclasses import dataclass


class DomainError(Exception):
    """Base class for domain-specific errors."""

    pass


class DatasetError(DomainError):
    """Raised when the financial dataset cannot be loaded or is not loaded."""

    pass


class ProductNotFoundError(DomainError):
    """Raised when a product id does not exist in the dataset."""

    pass


@dataclass(slots=True, eq=False)
class AssistantError(Exception):
    """Base class for assistant orchestration errors."""

    message: str
    error_code: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.error_code}: {self.message}"


class CompletionGatewayError(AssistantError):
    """The completion service was unreachable or returned an error.

    This is the only failure class that aborts a question.
    """

    def __init__(self, message: str = "Completion service request failed") -> None:
        super().__init__(message=message, error_code="gateway_error")


class MissingCredentialError(AssistantError):
    def __init__(
        self, message: str = "OPENAI_API_KEY environment variable is not set"
    ) -> None:
        super().__init__(message=message, error_code="missing_credential")


class TranscriptError(AssistantError):
    def __init__(self, message: str = "Invalid transcript operation") -> None:
        super().__init__(message=message, error_code="transcript_error")
