# config/settings.py
import os
import sys
from typing import Optional
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()


def _default_interpreter() -> str:
    return "lua" if sys.platform == "win32" else "lua5.1"


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    HOST: str = Field(default="0.0.0.0", validation_alias="HOST")
    PORT: int = Field(default=3000, validation_alias="PORT")
    API_VERSION: str = "2.1.0"

    # Auth
    MASTER_KEY: str = Field(..., min_length=1, validation_alias="MASTER_KEY")

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(default="*", validation_alias="ALLOWED_ORIGIN")
    MAX_PAYLOAD_MB: int = Field(default=50, validation_alias="MAX_PAYLOAD_MB")
    TRUST_PROXY: bool = Field(default=True, validation_alias="TRUST_PROXY")
    RATE_LIMIT_ENABLED: bool = Field(default=False, validation_alias="RATE_LIMIT_ENABLED")
    RATE_LIMIT_TIMES: int = Field(default=30, validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(default=60, validation_alias="RATE_LIMIT_SECONDS")
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0", validation_alias="REDIS_URL"
    )

    # Obfuscation engine
    ENGINE_LABEL: str = "lua.rip v2.0"
    ENGINE_INTERPRETER: str = Field(
        default_factory=_default_interpreter, validation_alias="ENGINE_INTERPRETER"
    )
    ENGINE_SCRIPT: str = Field(default="lua.rip.lua", validation_alias="ENGINE_SCRIPT")
    ENGINE_CWD: str = Field(default="..", validation_alias="ENGINE_CWD")

    # Queue
    WORK_DIR: str = Field(default="temp", validation_alias="WORK_DIR")
    MAX_CONCURRENT_JOBS: int = Field(
        default=1, ge=1, validation_alias="MAX_CONCURRENT_JOBS"
    )  # 1 keeps a 1GB host safe
    JOB_RETENTION_SECONDS: float = Field(
        default=3600, gt=0, validation_alias="JOB_RETENTION_SECONDS"
    )
    SHUTDOWN_GRACE_SECONDS: float = Field(
        default=30, ge=0, validation_alias="SHUTDOWN_GRACE_SECONDS"
    )

    # Logging knobs
    LOGGER_NAME: str = "luarip-api"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")
    # None picks colour when stdout is a terminal.
    LOG_COLOR: Optional[bool] = Field(default=None, validation_alias="LOG_COLOR")

    @property
    def engine_script_path(self) -> str:
        return os.path.abspath(os.path.join(self.ENGINE_CWD, self.ENGINE_SCRIPT))

    @property
    def max_payload_bytes(self) -> int:
        return self.MAX_PAYLOAD_MB * 1024 * 1024


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
