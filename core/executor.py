# core/executor.py
import logging
from typing import Callable
from core.engine import EngineRunner
from core.entities import ArtifactPaths, EngineOutcome
from model.job import Job, JobResult, ResultStats
from repository.artifact_repository import ArtifactRepository
from util import functions
from util.constants import UNKNOWN_ENGINE_ERROR
from util.errors import ExecutionError
from util.timing import timed

logger = logging.getLogger(__name__)


class Executor:
    """
    Runs one dispatched job end to end:
      write input -> run engine -> judge by output file -> record outcome

    Whatever happens, the input artifact is removed and `on_finished` is called
    exactly once, so a broken job can never hold on to its slot.
    """

    def __init__(
        self,
        artifacts: ArtifactRepository,
        engine: EngineRunner,
        files_route: str,
        on_finished: Callable[[Job], None],
    ) -> None:
        self._artifacts = artifacts
        self._engine = engine
        self._files_route = files_route
        self._on_finished = on_finished

    async def execute(self, job: Job) -> None:
        try:
            outcome = await self._run(job)
            self._record(job, outcome)
        except ExecutionError as exc:
            logger.error("job.failed job=%s exit=%s", job.id, job.exit_code)
            self._fail(job, str(exc))
        except OSError as exc:
            # strerror only: the full message carries the artifact path.
            logger.error("job.setup.error job=%s err=%s", job.id, type(exc).__name__)
            self._fail(job, f"{type(exc).__name__}: {exc.strerror or 'I/O error'}")
        except Exception as exc:
            logger.exception("job.execute.error job=%s", job.id)
            self._fail(job, str(exc) or type(exc).__name__)
        finally:
            self._artifacts.delete_input(job.token)
            self._on_finished(job)

    async def _run(self, job: Job) -> EngineOutcome:
        paths = ArtifactPaths(
            input=self._artifacts.input_path(job.token),
            output=self._artifacts.output_path(job.token),
        )
        self._artifacts.put_input(job.token, job.request.script.encode("utf-8"))
        argv = self._engine.build_command(paths.input, paths.output, job.request)
        logger.info("engine.start job=%s args=%s", job.id, " ".join(argv[4:]))
        with timed(logger, "engine.run", job=job.id):
            return await self._engine.run(argv)

    def _record(self, job: Job, outcome: EngineOutcome) -> None:
        job.exit_code = outcome.returncode
        output_size = self._artifacts.output_size(job.token)
        if output_size is None:
            raise ExecutionError(outcome.stderr.strip() or UNKNOWN_ENGINE_ERROR)

        if outcome.returncode not in (0, None):
            logger.warning(
                "job.exit.nonzero job=%s exit=%s output=present",
                job.id,
                outcome.returncode,
            )

        now = functions.now_ms()
        input_size = len(job.request.script.encode("utf-8"))
        duration = (now - (job.started_at or now)) / 1000
        job.mark_completed(
            JobResult(
                url=self._result_url(job),
                stats=ResultStats(
                    original_size=input_size,
                    obfuscated_size=output_size,
                    ratio=functions.size_ratio(output_size, input_size),
                    time=duration,
                ),
            ),
            now,
        )
        logger.info(
            "job.completed job=%s bytes_in=%d bytes_out=%d secs=%.2f",
            job.id,
            input_size,
            output_size,
            duration,
        )

    def _fail(self, job: Job, error: str) -> None:
        # Already terminal: keep the recorded outcome.
        if job.is_terminal:
            logger.error("job.fail.ignored job=%s status=%s", job.id, job.status)
            return
        job.mark_failed(error, functions.now_ms())

    def _result_url(self, job: Job) -> str:
        return f"{job.base_url}{self._files_route}/{self._artifacts.output_name(job.token)}"
