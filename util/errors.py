# util/errors.py
from fastapi import HTTPException, status
from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)

    @classmethod
    def of(cls, error: ErrorMessage) -> "AppError":
        return cls(error.value.message, error.value.http_status)


class JobConflictError(AppError):
    def __init__(self, job_id: str) -> None:
        super().__init__(
            ErrorMessage.JOB_CONFLICT.value.message,
            ErrorMessage.JOB_CONFLICT.value.http_status,
        )
        self.job_id = job_id


class ExecutionError(Exception):
    """Engine run produced no usable output. Recorded on the job, never raised to clients."""


class InvalidTransitionError(RuntimeError):
    def __init__(self, job_id: str, current: str, target: str) -> None:
        super().__init__(f"job {job_id}: illegal transition {current} -> {target}")
        self.job_id = job_id
        self.current = current
        self.target = target
