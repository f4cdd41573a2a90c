# core/entities.py
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class ArtifactPaths:
    input: Path
    output: Path


@dataclass
class EngineOutcome:
    """
    What one engine run left behind. `returncode` is diagnostic only;
    success is decided by the output file existing.
    """

    returncode: Optional[int]
    stderr: str
