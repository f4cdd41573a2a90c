import asyncio
import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest

TESTS_DIR = Path(__file__).resolve().parent

# config.settings reads the environment at import time.
os.environ["APP_ENV"] = "test"
os.environ["MASTER_KEY"] = "test-master-key"
os.environ["WORK_DIR"] = tempfile.mkdtemp(prefix="luarip-tests-")
os.environ["ENGINE_INTERPRETER"] = sys.executable
os.environ["ENGINE_SCRIPT"] = str(TESTS_DIR / "fake_engine.py")
os.environ["ENGINE_CWD"] = str(TESTS_DIR)
os.environ["MAX_PAYLOAD_MB"] = "1"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["TRUST_PROXY"] = "true"

from core.engine import EngineRunner  # noqa: E402
from core.entities import EngineOutcome  # noqa: E402
from repository.artifact_repository import ArtifactRepository  # noqa: E402
from repository.job_repository import JobRepository  # noqa: E402
from service.job_service import JobService  # noqa: E402

MASTER_KEY = os.environ["MASTER_KEY"]
FAKE_ENGINE = TESTS_DIR / "fake_engine.py"


class GatedEngine(EngineRunner):
    """
    In-process engine double. Each run blocks on its own gate until the test
    releases it (or immediately with auto_release), then follows the file
    contract: writes argv[3] unless the script contains NO_OUTPUT.
    """

    def __init__(self, auto_release: bool = False) -> None:
        super().__init__(interpreter="lua5.1", script="lua.rip.lua", cwd=".")
        self.auto_release = auto_release
        self.calls: List[List[str]] = []
        self.gates: List[asyncio.Event] = []
        self.running = 0
        self.max_running = 0

    async def run(self, argv: Sequence[str]) -> EngineOutcome:
        self.calls.append(list(argv))
        gate = asyncio.Event()
        if self.auto_release:
            gate.set()
        self.gates.append(gate)
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            await gate.wait()
        finally:
            self.running -= 1

        src, dst = Path(argv[2]), Path(argv[3])
        script = src.read_text(encoding="utf-8")
        if "NO_OUTPUT" in script:
            return EngineOutcome(returncode=1, stderr="engine exploded\n")
        dst.write_text(script * 3, encoding="utf-8")
        return EngineOutcome(returncode=0, stderr="")

    def release(self, index: int) -> None:
        self.gates[index].set()

    def release_all(self) -> None:
        for gate in self.gates:
            gate.set()

    def input_names(self) -> List[str]:
        return [Path(argv[2]).name for argv in self.calls]


async def wait_until(
    predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.005
) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(interval)


@pytest.fixture()
def work_dir(tmp_path: Path) -> Path:
    return tmp_path / "work"


@pytest.fixture()
def artifacts(work_dir: Path) -> ArtifactRepository:
    repo = ArtifactRepository(work_dir)
    repo.ensure_dirs()
    return repo


@pytest.fixture()
def make_service(artifacts: ArtifactRepository):
    def _make(
        engine: Optional[EngineRunner] = None,
        *,
        max_concurrent: int = 1,
        retention_seconds: float = 60.0,
    ) -> JobService:
        return JobService(
            JobRepository(),
            artifacts,
            engine or GatedEngine(auto_release=True),
            max_concurrent=max_concurrent,
            retention_seconds=retention_seconds,
            shutdown_grace_seconds=1.0,
        )

    return _make


@pytest.fixture()
def real_engine() -> EngineRunner:
    return EngineRunner(
        interpreter=sys.executable, script=str(FAKE_ENGINE), cwd=str(TESTS_DIR)
    )


@pytest.fixture()
def gated_engine() -> GatedEngine:
    return GatedEngine()


@pytest.fixture()
def until():
    return wait_until
