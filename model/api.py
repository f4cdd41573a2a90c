# model/api.py
from typing import Any, Literal, Optional
from pydantic import BaseModel, field_validator
from model.job import JobOptions, JobResult, JobStatus


class ObfuscateRequest(BaseModel):
    # Wrongly typed fields are dropped; the service applies defaults and the
    # empty-script check.
    script: Optional[str] = None
    profile: Optional[str] = None
    options: Optional[JobOptions] = None

    @field_validator("script", "profile", mode="before")
    @classmethod
    def drop_non_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("options", mode="before")
    @classmethod
    def drop_non_object(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, JobOptions)) else None


class ObfuscateResponse(BaseModel):
    success: bool = True
    job_id: str
    status: Literal["queued"] = "queued"
    status_url: str
    queue_position: int


class JobStatusResponse(BaseModel):
    id: str
    status: JobStatus
    submitted_at: int
    started_at: Optional[int] = None
    completed_at: Optional[int] = None
    result: Optional[JobResult] = None
    error: Optional[str] = None
    position: Optional[int] = None


class QueueStatus(BaseModel):
    waiting: int
    active: int
    total_jobs_stored: int


class ApiStatusResponse(BaseModel):
    status: Literal["online"] = "online"
    version: str
    queue: QueueStatus


class TypeResponse(BaseModel):
    type: str
    engine: str


class FeatureLimits(BaseModel):
    max_size_mb: int
    queue_enabled: bool = True


class FeaturesResponse(BaseModel):
    presets: list[str]
    options: list[str]
    limits: FeatureLimits
