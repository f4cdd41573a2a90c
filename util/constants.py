from typing import Final


class InternalURIs:
    HEALTHZ = "/healthz"
    OBFUSCATE = "/obfuscate"
    STATUS = "/status"
    JOB_STATUS = STATUS + "/{job_id}"
    TYPE = "/type"
    FEATURES = "/features"
    FILES = "/files/lua"


# Entropy for generated identifiers (hex output is twice as long).
PUBLIC_ID_BYTES: Final[int] = 12
ARTIFACT_TOKEN_BYTES: Final[int] = 16

UNKNOWN_ENGINE_ERROR: Final[str] = "Unknown error"

API_TYPE: Final[str] = "premium_api"
FEATURE_PRESETS: Final[list[str]] = ["speed", "balanced", "maximum", "luasec"]
FEATURE_OPTIONS: Final[list[str]] = ["junk_yard", "vm", "anti_tamper", "watermark"]
