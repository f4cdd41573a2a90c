# repository/artifact_repository.py
import logging
from pathlib import Path
from typing import Optional
from repository.namespaces import INPUT_SUFFIX, INPUTS_DIR, OUTPUT_SUFFIX, OUTPUTS_DIR

logger = logging.getLogger(__name__)


class ArtifactRepository:
    """
    On-disk scripts keyed by the job's artifact token.

    Layout under the work dir:
      in/<token>.in.lua   written before the engine runs, removed right after
      out/<token>.lua     written by the engine, served statically until cleanup

    Inputs and outputs live in separate directories so only outputs are ever
    reachable through the static mount.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)
        self._inputs = self._root / INPUTS_DIR
        self._outputs = self._root / OUTPUTS_DIR

    @property
    def outputs_dir(self) -> Path:
        return self._outputs

    def ensure_dirs(self) -> None:
        self._inputs.mkdir(parents=True, exist_ok=True)
        self._outputs.mkdir(parents=True, exist_ok=True)

    def input_path(self, token: str) -> Path:
        return self._inputs / f"{token}{INPUT_SUFFIX}"

    @staticmethod
    def output_name(token: str) -> str:
        return f"{token}{OUTPUT_SUFFIX}"

    def output_path(self, token: str) -> Path:
        return self._outputs / self.output_name(token)

    def put_input(self, token: str, data: bytes) -> Path:
        path = self.input_path(token)
        path.write_bytes(data)
        return path

    def output_size(self, token: str) -> Optional[int]:
        """Size of the engine output in bytes, None if the engine wrote nothing."""
        path = self.output_path(token)
        if not path.is_file():
            return None
        return path.stat().st_size

    def delete_input(self, token: str) -> int:
        return self._unlink(self.input_path(token))

    def delete_output(self, token: str) -> int:
        return self._unlink(self.output_path(token))

    @staticmethod
    def _unlink(path: Path) -> int:
        try:
            path.unlink()
        except FileNotFoundError:
            return 0
        except OSError as exc:
            logger.warning(
                "artifacts.unlink.error dir=%s err=%s", path.parent.name, type(exc).__name__
            )
            return 0
        return 1
