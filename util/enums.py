# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class Profile(str, Enum):
    SPEED = "speed"
    BALANCED = "balanced"
    MAXIMUM = "maximum"

    @classmethod
    def resolve(cls, value: str | None) -> "Profile":
        # Unknown or missing profiles fall back to the balanced default.
        try:
            return cls(value)
        except ValueError:
            return cls.BALANCED


class Preset(str, Enum):
    LUASEC = "luasec"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    UNAUTHORIZED = ErrorInfo("Unauthorized", status.HTTP_401_UNAUTHORIZED)
    NO_SCRIPT = ErrorInfo("No script provided", status.HTTP_400_BAD_REQUEST)
    JOB_NOT_FOUND = ErrorInfo("Job not found or expired", status.HTTP_404_NOT_FOUND)
    JOB_CONFLICT = ErrorInfo("Job id already in use", status.HTTP_409_CONFLICT)
    # Literal 413: Starlette renamed the constant and deprecated the old name.
    PAYLOAD_TOO_LARGE = ErrorInfo("Payload too large", 413)
    INVALID_BODY = ErrorInfo("Request body must be a JSON object", status.HTTP_400_BAD_REQUEST)
