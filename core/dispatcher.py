# core/dispatcher.py
import logging
from collections import deque
from typing import Callable, Deque, List, Optional
from model.job import Job
from repository.job_repository import JobRepository
from util import functions

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    FIFO backlog of queued job ids plus a bounded in-flight counter.

    Flow:
    - enqueue() appends a freshly created job id.
    - try_advance() pulls from the head while a slot is free, flips each job to
      processing and hands it to `launch`.
    - release() frees a slot once a job reaches a terminal state; the caller is
      expected to call try_advance() again.

    An id whose record has disappeared is dropped without taking a slot.
    """

    def __init__(
        self,
        jobs: JobRepository,
        ceiling: int,
        launch: Callable[[Job], None],
    ) -> None:
        if ceiling < 1:
            raise ValueError("ceiling must be >= 1")
        self._jobs = jobs
        self._ceiling = ceiling
        self._launch = launch
        self._backlog: Deque[str] = deque()
        self._active = 0
        self._closed = False

    @property
    def waiting(self) -> int:
        return len(self._backlog)

    @property
    def active(self) -> int:
        return self._active

    def enqueue(self, job_id: str) -> int:
        self._backlog.append(job_id)
        return len(self._backlog)

    def position(self, job_id: str) -> Optional[int]:
        """1-based position in the backlog, None if not waiting."""
        try:
            return self._backlog.index(job_id) + 1
        except ValueError:
            return None

    def try_advance(self) -> List[Job]:
        started: List[Job] = []
        while not self._closed and self._active < self._ceiling and self._backlog:
            job_id = self._backlog.popleft()
            job = self._jobs.get(job_id)
            if job is None:
                logger.debug("dispatch.stale job=%s", job_id)
                continue

            self._active += 1
            job.mark_processing(functions.now_ms())
            logger.info(
                "dispatch.start job=%s active=%d waiting=%d",
                job_id,
                self._active,
                len(self._backlog),
            )
            self._launch(job)
            started.append(job)
        return started

    def release(self) -> None:
        if self._active == 0:
            logger.warning("dispatch.release.underflow")
            return
        self._active -= 1

    def close(self) -> None:
        self._closed = True
