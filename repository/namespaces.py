# repository/namespaces.py
from typing import Final

INPUTS_DIR: Final[str] = "in"
OUTPUTS_DIR: Final[str] = "out"

INPUT_SUFFIX: Final[str] = ".in.lua"
OUTPUT_SUFFIX: Final[str] = ".lua"
