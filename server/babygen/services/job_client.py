"""HTTP client for the baby generator job API.

The client translates typed requests into single HTTP calls and typed
responses. It never retries and knows nothing about polling policy; see
``poll_orchestrator`` for that.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from urllib.parse import quote

import httpx

from ..config import settings
from ..errors import (
    CredentialMissingError,
    DecodeError,
    HttpError,
    InvalidCredentialError,
    JobCreationError,
    JobNotFoundError,
    TransportError,
)
from ..models.schemas import (
    BabyGenerationPayload,
    GenerationRequest,
    JobCreatedResponse,
    JobStatusResponse,
)
from .url_helpers import normalize_image_url

logger = logging.getLogger(__name__)

SUBMIT_TIMEOUT_SECONDS = 15.0
STATUS_TIMEOUT_SECONDS = 10.0
JOB_NOT_FOUND_MARKER = "job not found"


class JobStatus(str, Enum):
    """Server-side lifecycle of a generation job."""

    CREATING = "creating"
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_FOUND = "not-found"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "JobStatus":
        """Map a raw server status onto the enum; unrecognized values become UNKNOWN."""

        normalized = (raw or "").strip().lower().replace("_", "-")
        try:
            status = cls(normalized)
        except ValueError:
            return cls.UNKNOWN
        return status

    @property
    def in_progress(self) -> bool:
        return self in {JobStatus.CREATING, JobStatus.PENDING, JobStatus.RUNNING}


@dataclass(frozen=True)
class JobHandle:
    job_id: str


@dataclass
class JobStatusSnapshot:
    """One status reading for a job, superseded by the next poll."""

    status: JobStatus
    result_urls: list[str] = field(default_factory=list)
    error_detail: Optional[str] = None
    raw_status: Optional[str] = None


def _require_credential(api_key: Optional[str]) -> str:
    cleaned = (api_key or "").strip()
    if not cleaned:
        raise CredentialMissingError()
    if not (cleaned.isascii() and cleaned.isprintable()):
        raise InvalidCredentialError()
    return cleaned


class JobClient:
    """Talks to ``POST /baby-generator`` and ``GET /baby-generator/{jobId}``."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        submit_timeout: float = SUBMIT_TIMEOUT_SECONDS,
        status_timeout: float = STATUS_TIMEOUT_SECONDS,
    ):
        raw_base = (base_url or settings.api_base_url or "").strip()
        if not raw_base.startswith(("http://", "https://")):
            raise RuntimeError("Generator base URL must include http/https scheme")
        self._base_url = raw_base.rstrip("/")
        self._http_client = http_client
        self._submit_timeout = submit_timeout
        self._status_timeout = status_timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        timeout: float,
        json: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            if self._http_client is not None:
                return await self._http_client.request(method, url, headers=headers, json=json, timeout=timeout)
            async with httpx.AsyncClient(timeout=timeout) as client:
                return await client.request(method, url, headers=headers, json=json)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(exc) from exc

    async def submit(self, request: GenerationRequest, api_key: str) -> JobHandle:
        """Create a generation job and return its handle."""

        credential = _require_credential(api_key)
        payload = BabyGenerationPayload(
            father_image=normalize_image_url(request.father_image_url),
            mother_image=normalize_image_url(request.mother_image_url),
            gender=request.gender,
        )
        url = f"{self._base_url}/baby-generator"
        logger.info("Submitting baby generation job to %s (gender=%s)", url, payload.gender.value)

        response = await self._send(
            "POST",
            url,
            headers={"Content-Type": "application/json", "x-api-key": credential},
            json=payload.to_wire(),
            timeout=self._submit_timeout,
        )
        if not response.is_success:
            logger.warning(
                "Job submission failed with HTTP %s: %s", response.status_code, response.text[:200]
            )
            raise HttpError(response.status_code, response.text)

        try:
            created = JobCreatedResponse.model_validate(response.json())
        except ValueError as exc:
            logger.warning("Could not decode job creation response: %s", exc)
            raise DecodeError(exc) from exc

        if not created.job_id:
            logger.warning("Job creation response without jobId: %s", created.model_dump(exclude_none=True))
            raise JobCreationError(created.error_message or "API response missing jobId")

        logger.info("Job created successfully (job_id=%s)", created.job_id)
        return JobHandle(job_id=created.job_id)

    async def get_status(self, handle: JobHandle, api_key: str) -> JobStatusSnapshot:
        """Fetch the current status of ``handle``'s job."""

        credential = _require_credential(api_key)
        url = f"{self._base_url}/baby-generator/{quote(handle.job_id, safe='')}"

        response = await self._send(
            "GET",
            url,
            headers={"x-api-key": credential},
            timeout=self._status_timeout,
        )
        if response.status_code == 404 and JOB_NOT_FOUND_MARKER in response.text.lower():
            logger.info("Job %s not found by API (404)", handle.job_id)
            raise JobNotFoundError(handle.job_id)
        if not response.is_success:
            logger.debug(
                "Status check for %s returned HTTP %s: %s",
                handle.job_id,
                response.status_code,
                response.text[:200],
            )
            raise HttpError(response.status_code, response.text)

        try:
            body = JobStatusResponse.model_validate(response.json())
        except ValueError as exc:
            raise DecodeError(exc) from exc

        return JobStatusSnapshot(
            status=JobStatus.parse(body.status),
            result_urls=list(body.result or []),
            error_detail=body.error or body.error_message,
            raw_status=body.status,
        )
