"""Generation endpoints: submit a job and wait for its result."""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ..config import settings
from ..errors import HttpError
from ..models import schemas
from ..services.credentials import CredentialStore, default_credential_store
from ..services.job_client import JobClient
from ..services.poll_orchestrator import Failure, PollOrchestrator

router = APIRouter(prefix="/generations", tags=["generations"])

_FAILURE_STATUS_CODES = {
    "credential_missing": 401,
    "invalid_credential": 401,
    "job_not_found": 404,
    "polling_timeout": 504,
}


def _failure_status_code(outcome: Failure) -> int:
    error = outcome.error
    # Upstream rejected the key itself.
    if isinstance(error, HttpError) and error.status_code in {401, 403}:
        return 401
    return _FAILURE_STATUS_CODES.get(outcome.kind, 502)


@lru_cache(maxsize=1)
def get_credential_store() -> CredentialStore:
    return default_credential_store()


def get_orchestrator(request: Request) -> PollOrchestrator:
    """Build an orchestrator over the application's shared HTTP client."""

    http_client: Optional[httpx.AsyncClient] = getattr(request.app.state, "http_client", None)
    client = JobClient(
        base_url=settings.api_base_url,
        http_client=http_client,
        submit_timeout=settings.submit_timeout,
        status_timeout=settings.status_timeout,
    )
    return PollOrchestrator(
        client,
        poll_interval=settings.poll_interval,
        max_attempts=settings.max_poll_attempts,
    )


@router.post("", response_model=schemas.GenerationResponse)
async def create_generation(
    payload: schemas.GenerationRequest,
    x_api_key: Optional[str] = Header(default=None),
    store: CredentialStore = Depends(get_credential_store),
    orchestrator: PollOrchestrator = Depends(get_orchestrator),
) -> schemas.GenerationResponse:
    """Generate a baby image from two parent photos.

    The request blocks until the job completes, fails or runs out of its
    polling budget. The API key comes from the ``x-api-key`` header and falls
    back to the configured credential store.
    """

    api_key = (x_api_key or "").strip() or store.get_api_key() or ""
    outcome = await orchestrator.run(payload, api_key)
    if isinstance(outcome, Failure):
        detail = schemas.GenerationErrorDetail(kind=outcome.kind, message=outcome.detail, job_id=outcome.job_id)
        raise HTTPException(
            status_code=_failure_status_code(outcome),
            detail=detail.model_dump(by_alias=True),
        )

    return schemas.GenerationResponse(
        job_id=outcome.job_id,
        result_url=outcome.result_url,
        attempts=outcome.attempts,
    )
