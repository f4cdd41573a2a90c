# core/cleanup.py
import asyncio
import logging
from typing import Dict
from model.job import Job
from repository.artifact_repository import ArtifactRepository
from repository.job_repository import JobRepository

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """
    One-shot retention timers keyed by job id.

    arm() is called right after a job's terminal transition; `delay` seconds
    later the record and its output file are removed. Timers live on the event
    loop only and are gone after a restart.
    """

    def __init__(
        self, jobs: JobRepository, artifacts: ArtifactRepository, delay: float
    ) -> None:
        self._jobs = jobs
        self._artifacts = artifacts
        self._delay = delay
        self._handles: Dict[str, asyncio.TimerHandle] = {}

    @property
    def delay(self) -> float:
        return self._delay

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._handles

    def arm(self, job: Job) -> None:
        if job.id in self._handles:
            logger.warning("cleanup.arm.duplicate job=%s", job.id)
            return
        loop = asyncio.get_running_loop()
        self._handles[job.id] = loop.call_later(
            self._delay, self._purge, job.id, job.token
        )
        logger.debug("cleanup.armed job=%s delay=%s", job.id, self._delay)

    def cancel(self, job_id: str) -> bool:
        handle = self._handles.pop(job_id, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> int:
        n = 0
        for job_id in list(self._handles):
            n += int(self.cancel(job_id))
        return n

    def _purge(self, job_id: str, token: str) -> None:
        self._handles.pop(job_id, None)
        removed = self._jobs.delete(job_id)
        files = self._artifacts.delete_output(token)
        logger.info("cleanup.purged job=%s record=%d files=%d", job_id, removed, files)
