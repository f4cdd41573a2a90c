# core/engine.py
import asyncio
import logging
from pathlib import Path
from typing import List, Sequence
from core.entities import EngineOutcome
from model.job import JobRequest
from util.enums import Preset, Profile

logger = logging.getLogger(__name__)

FEATURE_FLAGS: dict[str, str] = {
    "vm": "--vm",
    "junk_yard": "--junk-yard",
}


def mode_args(request: JobRequest) -> List[str]:
    """
    Preset and profile are mutually exclusive:
      - the luasec preset wins when named by either `profile` or `options.preset`
      - otherwise `--profile <p>` with unknown values mapped to balanced
    """
    if Preset.LUASEC.value in (request.profile, request.options.preset):
        return ["--preset-luasec"]
    return ["--profile", Profile.resolve(request.profile).value]


def feature_args(request: JobRequest) -> List[str]:
    return [FEATURE_FLAGS[name] for name in request.options.feature_flags()]


class EngineRunner:
    """
    Adapter for the obfuscator CLI:
      <interpreter> <script> <input> <output> [mode] [features...]

    The CLI is file based: it writes <output> on success and leaves it absent on
    failure, with diagnostics on stderr.
    """

    def __init__(self, interpreter: str, script: str, cwd: str) -> None:
        self._interpreter = interpreter
        self._script = script
        self._cwd = cwd

    def build_command(
        self, input_path: Path, output_path: Path, request: JobRequest
    ) -> List[str]:
        return [
            self._interpreter,
            self._script,
            str(input_path),
            str(output_path),
            *mode_args(request),
            *feature_args(request),
        ]

    async def run(self, argv: Sequence[str]) -> EngineOutcome:
        """
        Spawn the CLI without a shell and wait for it.
        OSError (e.g. missing interpreter) propagates to the caller.
        """
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=self._cwd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await proc.communicate()
        logger.debug(
            "engine.exit pid=%s code=%s stdout_bytes=%d",
            proc.pid,
            proc.returncode,
            len(stdout),
        )
        return EngineOutcome(
            returncode=proc.returncode,
            stderr=stderr.decode("utf-8", errors="replace"),
        )
