"""Typed failures raised by the job client and reported by the poll orchestrator."""
from __future__ import annotations

from typing import Optional

_BODY_PREVIEW_CHARS = 200


class BabyGeneratorError(Exception):
    """Base class for every failure the generation core can report.

    ``kind`` is a stable machine-readable identifier; ``message`` is the
    human-readable text a caller can show to a user as-is.
    """

    kind = "baby_generator_error"
    transient = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CredentialMissingError(BabyGeneratorError):
    kind = "credential_missing"

    def __init__(self) -> None:
        super().__init__("API Key is not configured.")


class InvalidCredentialError(BabyGeneratorError):
    """The configured API key cannot be sent as an HTTP header value."""

    kind = "invalid_credential"

    def __init__(self) -> None:
        super().__init__("API Key contains characters that are not allowed; re-enter it as plain text.")


class InvalidImageURLError(BabyGeneratorError, ValueError):
    kind = "invalid_image_url"

    def __init__(self, url: str) -> None:
        super().__init__("Image URLs must be public web URLs (http/https).")
        self.url = url


class TransportError(BabyGeneratorError):
    """The request never produced an HTTP response (DNS, connect, timeout...)."""

    kind = "transport_error"
    transient = True

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Network request failed: {cause}")
        self.cause = cause


class HttpError(BabyGeneratorError):
    kind = "http_error"
    transient = True

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"API request failed with HTTP status: {status_code}.")
        self.status_code = status_code
        self.body = body

    @property
    def body_preview(self) -> str:
        return self.body[:_BODY_PREVIEW_CHARS]


class DecodeError(BabyGeneratorError):
    kind = "decode_error"
    transient = True

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Failed to decode API response: {cause}")
        self.cause = cause


class JobCreationError(BabyGeneratorError):
    kind = "job_creation_failed"

    def __init__(self, server_message: Optional[str] = None) -> None:
        super().__init__(server_message or "Failed to create baby generation job.")
        self.server_message = server_message


class JobNotFoundError(BabyGeneratorError):
    kind = "job_not_found"

    def __init__(self, job_id: Optional[str] = None) -> None:
        super().__init__("Job not found by API.")
        self.job_id = job_id


class JobFailedError(BabyGeneratorError):
    """The server reported the job itself as failed."""

    kind = "job_failed"

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(f"Job failed: {detail or 'Unknown error'}")
        self.detail = detail


class UnexpectedResponseError(BabyGeneratorError):
    kind = "unexpected_response"

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__("Received an unexpected response format from the API.")
        self.reason = reason


class PollingTimeoutError(BabyGeneratorError):
    kind = "polling_timeout"

    def __init__(self, job_id: str, attempts: int, poll_interval: float) -> None:
        super().__init__("Polling for job status timed out.")
        self.job_id = job_id
        self.attempts = attempts
        self.poll_interval = poll_interval

    @property
    def budget_seconds(self) -> float:
        return self.attempts * self.poll_interval
