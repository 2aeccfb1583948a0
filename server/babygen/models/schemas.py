"""Pydantic models describing request and response payloads."""
from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..services.url_helpers import normalize_image_url


class BabyGender(str, Enum):
    """Variant of baby image the generator should produce."""

    BOY = "babyBoy"
    GIRL = "babyGirl"


class GenerationRequest(BaseModel):
    """Two parent photos plus the requested variant.

    Both URLs are normalized on construction: query and fragment are removed
    and anything that is not an absolute http(s) URL is rejected.
    """

    model_config = ConfigDict(populate_by_name=True)

    father_image_url: str = Field(..., alias="fatherImage", description="Public URL of the first parent photo")
    mother_image_url: str = Field(..., alias="motherImage", description="Public URL of the second parent photo")
    gender: BabyGender = Field(default=BabyGender.BOY, description="Requested baby variant")

    @field_validator("father_image_url", "mother_image_url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        return normalize_image_url(value)


class BabyGenerationPayload(BaseModel):
    """JSON body of the create-job call."""

    model_config = ConfigDict(populate_by_name=True)

    father_image: str = Field(..., alias="fatherImage")
    mother_image: str = Field(..., alias="motherImage")
    gender: BabyGender

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, mode="json")


class JobCreatedResponse(BaseModel):
    """Body returned by a successful create-job call."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="ignore")

    job_id: Optional[str] = Field(default=None, alias="jobId")
    status: Optional[str] = None
    error_message: Optional[str] = Field(default=None, alias="errorMessage")
    details: Optional[Any] = None


class JobStatusResponse(BaseModel):
    """Body returned by the job-status call."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="ignore")

    status: Optional[str] = None
    result: Optional[List[str]] = None
    error: Optional[str] = None
    error_message: Optional[str] = Field(default=None, alias="errorMessage")


class GenerationResponse(BaseModel):
    """Response returned once a generation job produced an image."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(default="succeeded")
    job_id: Optional[str] = Field(default=None, serialization_alias="jobId")
    result_url: str = Field(..., serialization_alias="resultUrl")
    attempts: int = Field(default=0, description="Status polls issued before completion")


class GenerationErrorDetail(BaseModel):
    """Error body returned when a generation run ends in failure."""

    kind: str
    message: str
    job_id: Optional[str] = Field(default=None, serialization_alias="jobId")
