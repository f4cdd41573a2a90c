# service/job_service.py
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Set
from config.settings import Settings
from core.cleanup import CleanupScheduler
from core.dispatcher import Dispatcher
from core.engine import EngineRunner
from core.executor import Executor
from model.api import JobStatusResponse
from model.job import Job, JobRequest
from repository.artifact_repository import ArtifactRepository
from repository.job_repository import JobRepository
from util import functions
from util.constants import InternalURIs
from util.enums import ErrorMessage
from util.errors import AppError
from util.types import QueueCounts

logger = logging.getLogger(__name__)


@dataclass
class Submission:
    job: Job
    queue_position: int


class JobService:
    """
    Owns the job store, the dispatcher, the executor and the cleanup timers.

    All bookkeeping runs on the event loop thread and none of it awaits, so
    submit / status reads / completion handling never interleave mid-update.
    The only suspension point is the engine subprocess inside Executor.
    """

    def __init__(
        self,
        jobs: JobRepository,
        artifacts: ArtifactRepository,
        engine: EngineRunner,
        *,
        max_concurrent: int,
        retention_seconds: float,
        shutdown_grace_seconds: float = 30.0,
    ) -> None:
        self._jobs = jobs
        self._artifacts = artifacts
        self._grace = shutdown_grace_seconds
        self._tasks: Set[asyncio.Task] = set()
        self._dispatcher = Dispatcher(jobs, max_concurrent, launch=self._launch)
        self._executor = Executor(
            artifacts, engine, InternalURIs.FILES, on_finished=self._on_finished
        )
        self._cleanup = CleanupScheduler(jobs, artifacts, retention_seconds)

    @classmethod
    def from_settings(cls, settings: Settings) -> "JobService":
        artifacts = ArtifactRepository(settings.WORK_DIR)
        artifacts.ensure_dirs()
        engine = EngineRunner(
            interpreter=settings.ENGINE_INTERPRETER,
            script=settings.engine_script_path,
            cwd=settings.ENGINE_CWD,
        )
        return cls(
            JobRepository(),
            artifacts,
            engine,
            max_concurrent=settings.MAX_CONCURRENT_JOBS,
            retention_seconds=settings.JOB_RETENTION_SECONDS,
            shutdown_grace_seconds=settings.SHUTDOWN_GRACE_SECONDS,
        )

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def cleanup(self) -> CleanupScheduler:
        return self._cleanup

    @property
    def jobs(self) -> JobRepository:
        return self._jobs

    @property
    def artifacts(self) -> ArtifactRepository:
        return self._artifacts

    # ---------------- Submission ----------------

    def submit(self, request: JobRequest, *, base_url: str) -> Submission:
        """
        Create a queued job and kick the dispatcher.
        Returns the backlog length after dispatch as a one-off snapshot.
        """
        if not request.script:
            raise AppError.of(ErrorMessage.NO_SCRIPT)

        job = self._jobs.create(request, base_url=base_url, now=functions.now_ms())
        self._dispatcher.enqueue(job.id)
        self._dispatcher.try_advance()

        position = self._dispatcher.waiting
        logger.info(
            "job.submit.ok job=%s bytes=%d queue=%d",
            job.id,
            len(request.script.encode("utf-8")),
            position,
        )
        return Submission(job=job, queue_position=position)

    # ---------------- Status ----------------

    def global_status(self) -> QueueCounts:
        return QueueCounts(
            waiting=self._dispatcher.waiting,
            active=self._dispatcher.active,
            total_jobs_stored=len(self._jobs),
        )

    def job_status(self, job_id: str) -> JobStatusResponse:
        job = self._jobs.get(job_id)
        if job is None:
            raise AppError.of(ErrorMessage.JOB_NOT_FOUND)

        view = JobStatusResponse(
            id=job.id,
            status=job.status,
            submitted_at=job.submitted_at,
            started_at=job.started_at,
            completed_at=job.completed_at,
        )
        if job.status == "completed":
            view.result = job.result
        elif job.status == "failed":
            view.error = job.error
        elif job.status == "queued":
            view.position = self._dispatcher.position(job.id)
        return view

    # ---------------- Execution plumbing ----------------

    def _launch(self, job: Job) -> None:
        task = asyncio.create_task(self._executor.execute(job), name=f"job-{job.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_finished(self, job: Job) -> None:
        self._dispatcher.release()
        self._cleanup.arm(job)
        logger.info(
            "job.finished job=%s status=%s active=%d waiting=%d",
            job.id,
            job.status,
            self._dispatcher.active,
            self._dispatcher.waiting,
        )
        self._dispatcher.try_advance()

    async def shutdown(self, timeout: Optional[float] = None) -> None:
        """Stop dispatching, drop retention timers, give running engines a grace period."""
        self._dispatcher.close()
        pending = set(self._tasks)
        if pending:
            grace = self._grace if timeout is None else timeout
            _, still_running = await asyncio.wait(pending, timeout=grace)
            if still_running:
                logger.warning("jobs.shutdown.running count=%d", len(still_running))
        cancelled = self._cleanup.cancel_all()
        logger.info("jobs.shutdown timers=%d drained=%d", cancelled, len(pending))
