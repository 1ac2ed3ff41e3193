"""Error types shared by the service and the orchestration client.

Each class maps to one row of the error taxonomy: bad input, missing
configuration, provider/transport failure and schema validation failure.
The service turns them into ``{error, details}`` JSON bodies; the client
turns them into user-facing notices at the generator boundary.
"""

from __future__ import annotations

from typing import Any, Optional


class StudyGenError(Exception):
    """Base class for all application errors."""

    status_code: int = 500

    def __init__(self, message: str, *, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class DocumentRejectedError(StudyGenError):
    """Uploaded file is not a PDF, is too large, or cannot be decoded."""

    status_code = 400


class ProviderNotConfiguredError(StudyGenError):
    """A provider credential is missing from the environment."""

    status_code = 500

    def __init__(self, provider_label: str, env_var: str) -> None:
        super().__init__(
            f"{provider_label} API key is not configured. "
            f"Please set {env_var} in your environment variables."
        )
        self.env_var = env_var


class ProviderError(StudyGenError):
    """The model provider (or the service in front of it) failed."""

    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        details: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status = status


class ProviderTimeoutError(ProviderError):
    status_code = 504


class MalformedResponseError(ProviderError):
    """A response body could not be reassembled into JSON."""


class ArtifactValidationError(StudyGenError):
    """Well-formed output that fails the artifact's shape constraints."""

    status_code = 500

    def __init__(self, message: str, *, issues: Optional[list] = None) -> None:
        self.issues = list(issues or [])
        details = "; ".join(str(i) for i in self.issues) or None
        super().__init__(message, details=details)
