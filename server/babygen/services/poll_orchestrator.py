"""Submit-then-poll state machine for baby generation jobs.

One ``run`` call moves through ``SUBMITTING -> POLLING -> SUCCEEDED | FAILED``
and always returns exactly one outcome. Polling is strictly sequential: wait
for the poll interval, read the status, classify it. Transient transport,
HTTP and decode errors are tolerated on every attempt but the last; anything
else the job client raises ends the run immediately.

Cancelling the awaiting task abandons the current wait or request and no
further calls are issued.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, ClassVar, Optional, Union

from ..errors import (
    BabyGeneratorError,
    JobFailedError,
    JobNotFoundError,
    PollingTimeoutError,
    UnexpectedResponseError,
)
from ..models.schemas import GenerationRequest
from .job_client import JobClient, JobHandle, JobStatus, JobStatusSnapshot

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 3.0
MAX_POLL_ATTEMPTS = 30

Sleep = Callable[[float], Awaitable[object]]


class PollState(Enum):
    SUBMITTING = "submitting"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class Success:
    result_url: str
    job_id: str
    attempts: int

    ok: ClassVar[bool] = True
    state: ClassVar[PollState] = PollState.SUCCEEDED


@dataclass
class Failure:
    error: BabyGeneratorError
    job_id: Optional[str] = None
    attempts: int = 0

    ok: ClassVar[bool] = False
    state: ClassVar[PollState] = PollState.FAILED

    @property
    def kind(self) -> str:
        return self.error.kind

    @property
    def detail(self) -> str:
        return self.error.message


PollOutcome = Union[Success, Failure]


class PollOrchestrator:
    """Drive a ``JobClient`` from submission to a single terminal outcome.

    The orchestrator holds no per-run state, so one instance can serve any
    number of concurrent ``run`` calls.
    """

    def __init__(
        self,
        client: JobClient,
        *,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        max_attempts: int = MAX_POLL_ATTEMPTS,
        sleep: Sleep = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        self._client = client
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._sleep = sleep

    @property
    def timeout_budget(self) -> float:
        """Wall-clock seconds spent waiting before the run gives up."""

        return self._poll_interval * self._max_attempts

    async def run(self, request: GenerationRequest, api_key: str) -> PollOutcome:
        try:
            handle = await self._client.submit(request, api_key)
        except BabyGeneratorError as exc:
            logger.warning("Baby generation submission failed (%s): %s", exc.kind, exc.message)
            return Failure(error=exc)

        logger.info(
            "Starting polling for job %s (max: %s attempts, interval: %ss, timeout: %ss)",
            handle.job_id,
            self._max_attempts,
            self._poll_interval,
            self.timeout_budget,
        )
        outcome = await self._poll(handle, api_key)
        if outcome.ok:
            logger.info("Job %s completed after %s polls: %s", handle.job_id, outcome.attempts, outcome.result_url)
        else:
            logger.warning("Job %s ended with %s: %s", handle.job_id, outcome.kind, outcome.detail)
        return outcome

    async def _poll(self, handle: JobHandle, api_key: str) -> PollOutcome:
        for attempt in range(1, self._max_attempts + 1):
            await self._sleep(self._poll_interval)
            logger.debug("Polling %s, attempt %s/%s", handle.job_id, attempt, self._max_attempts)

            try:
                snapshot = await self._client.get_status(handle, api_key)
            except BabyGeneratorError as exc:
                if not exc.transient or attempt == self._max_attempts:
                    return Failure(error=exc, job_id=handle.job_id, attempts=attempt)
                logger.warning(
                    "Polling error for job %s on attempt %s: %s", handle.job_id, attempt, exc.message
                )
                continue

            outcome = self._classify(snapshot, handle, attempt)
            if outcome is not None:
                return outcome

        return Failure(
            error=PollingTimeoutError(handle.job_id, self._max_attempts, self._poll_interval),
            job_id=handle.job_id,
            attempts=self._max_attempts,
        )

    def _classify(self, snapshot: JobStatusSnapshot, handle: JobHandle, attempt: int) -> Optional[PollOutcome]:
        """Return the terminal outcome for ``snapshot``, or None to keep polling."""

        status = snapshot.status
        if status.in_progress:
            logger.debug("Job %s status is '%s'; continuing to poll", handle.job_id, status.value)
            return None
        if status is JobStatus.UNKNOWN:
            # Unrecognized server vocabulary is treated as transient.
            logger.warning(
                "Job %s returned unexpected status %r; continuing poll cautiously", handle.job_id, snapshot.raw_status
            )
            return None
        if status is JobStatus.COMPLETED:
            if snapshot.result_urls:
                return Success(result_url=snapshot.result_urls[0], job_id=handle.job_id, attempts=attempt)
            error: BabyGeneratorError = UnexpectedResponseError("completed job without result URLs")
        elif status is JobStatus.FAILED:
            error = JobFailedError(snapshot.error_detail)
        else:
            error = JobNotFoundError(handle.job_id)
        return Failure(error=error, job_id=handle.job_id, attempts=attempt)
