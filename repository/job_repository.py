# repository/job_repository.py
import logging
from typing import Dict, Optional
from model.job import Job, JobRequest
from util import functions
from util.constants import ARTIFACT_TOKEN_BYTES, PUBLIC_ID_BYTES
from util.errors import JobConflictError

logger = logging.getLogger(__name__)


class JobRepository:
    """
    In-process job records keyed by public job id.

    Flow:
    - create() mints the public id and the artifact token independently.
    - Records are mutated in place by the dispatcher and executor.
    - delete() is only called by the cleanup scheduler once retention expires.

    Every method is synchronous so a caller on the event loop sees each
    operation as atomic.
    """

    def __init__(self) -> None:
        self._jobs: Dict[str, Job] = {}

    # ---------------- Core CRUD ----------------

    def create(self, request: JobRequest, *, base_url: str, now: int) -> Job:
        job = Job(
            id=functions.new_token(PUBLIC_ID_BYTES),
            token=functions.new_token(ARTIFACT_TOKEN_BYTES),
            status="queued",
            submitted_at=now,
            request=request,
            base_url=base_url,
        )
        self.put(job)
        return job

    def put(self, job: Job) -> None:
        # Never overwrite a live record.
        if job.id in self._jobs:
            logger.error("jobs.create.conflict job=%s", job.id)
            raise JobConflictError(job.id)
        self._jobs[job.id] = job

    def get(self, job_id: str) -> Optional[Job]:
        if not job_id:
            return None
        return self._jobs.get(job_id)

    def delete(self, job_id: str) -> int:
        return 1 if self._jobs.pop(job_id, None) is not None else 0

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs
