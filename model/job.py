# model/job.py
from typing import Any, Literal, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from util.errors import InvalidTransitionError

JobStatus = Literal[
    "queued",
    "processing",
    "completed",
    "failed",
]

TERMINAL_STATUSES: tuple[JobStatus, ...] = ("completed", "failed")

_NEXT: dict[str, tuple[JobStatus, ...]] = {
    "queued": ("processing",),
    "processing": TERMINAL_STATUSES,
}


def _text_or_none(value: Any) -> Optional[str]:
    # Non-string selectors are treated as absent and fall back to defaults.
    return value if isinstance(value, str) else None


class JobOptions(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    preset: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("preset", "presetName")
    )
    vm: bool = False
    junk_yard: bool = False
    flags: frozenset[str] = Field(
        default_factory=frozenset,
        validation_alias=AliasChoices("flags", "featureFlags", "feature_flags"),
    )

    @field_validator("preset", mode="before")
    @classmethod
    def coerce_preset(cls, value: Any) -> Optional[str]:
        return _text_or_none(value)

    @field_validator("vm", "junk_yard", mode="before")
    @classmethod
    def coerce_toggle(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("flags", mode="before")
    @classmethod
    def coerce_flags(cls, value: Any) -> frozenset[str]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set, frozenset)):
            return frozenset()
        return frozenset(
            v.strip().replace("-", "_") for v in value if isinstance(v, str)
        )

    def feature_flags(self) -> list[str]:
        """Enabled toggles in a stable order, from booleans or the flag set."""
        return [
            name
            for name in ("vm", "junk_yard")
            if getattr(self, name) or name in self.flags
        ]


class JobRequest(BaseModel):
    script: str
    profile: Optional[str] = None
    options: JobOptions = Field(default_factory=JobOptions)

    @field_validator("profile", mode="before")
    @classmethod
    def coerce_profile(cls, value: Any) -> Optional[str]:
        return _text_or_none(value)


class ResultStats(BaseModel):
    original_size: int
    obfuscated_size: int
    ratio: float
    time: float


class JobResult(BaseModel):
    success: bool = True
    url: str
    stats: ResultStats


class Job(BaseModel):
    id: str
    token: str = Field(exclude=True, repr=False)
    status: JobStatus = "queued"
    submitted_at: int
    started_at: Optional[int] = None
    completed_at: Optional[int] = None
    request: JobRequest = Field(repr=False)
    base_url: str
    result: Optional[JobResult] = None
    error: Optional[str] = None
    exit_code: Optional[int] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def _advance(self, target: JobStatus) -> None:
        if target not in _NEXT.get(self.status, ()):
            raise InvalidTransitionError(self.id, self.status, target)
        self.status = target

    def mark_processing(self, now: int) -> None:
        self._advance("processing")
        self.started_at = now

    def mark_completed(self, result: JobResult, now: int) -> None:
        self._advance("completed")
        self.result = result
        self.completed_at = now

    def mark_failed(self, error: str, now: int) -> None:
        self._advance("failed")
        self.error = error
        self.completed_at = now
