"""
corgiquest.errors — Exception taxonomy
=======================================

Raised by the service layer and translated to HTTP responses in
:mod:`corgiquest.api.main`.
"""

from __future__ import annotations

from typing import Any


class CorgiQuestError(Exception):
    """Base class for all domain errors."""


class InvalidEmailError(CorgiQuestError, ValueError):
    """Email failed normalisation / shape validation.  Nothing was written."""

    def __init__(self, email: str) -> None:
        super().__init__("Invalid email format")
        self.email = email


class NotFoundError(CorgiQuestError):
    """A referenced row does not exist."""


class UpstreamServiceError(CorgiQuestError):
    """A hosted collaborator (LLM, scraper, payment API) failed.

    Carries the status to surface to the caller so the UI can offer a
    retry.  Nothing retries automatically.
    """

    def __init__(self, status: int, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message, "status": self.status}
        if self.details is not None:
            body["details"] = self.details
        return body
