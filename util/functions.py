# util/functions.py
import secrets
import time
from typing import Mapping


def new_token(nbytes: int) -> str:
    """Hex token from the OS CSPRNG."""
    return secrets.token_hex(nbytes)


def now_ms() -> int:
    return int(time.time() * 1000)


def size_ratio(output_size: int, input_size: int) -> float:
    """
    - Output/input byte ratio rounded to 2 decimals.
    - 0.0 for an empty input instead of dividing by zero.
    """
    if input_size <= 0:
        return 0.0
    return round(output_size / input_size, 2)


def origin_base_url(
    headers: Mapping[str, str], scheme: str, host: str, trust_proxy: bool
) -> str:
    """
    Build scheme://host for client-facing links.
    Forwarded headers win when the app sits behind a trusted proxy.
    """
    if trust_proxy:
        scheme = headers.get("x-forwarded-proto") or scheme
        host = headers.get("x-forwarded-host") or host
        # Proxies may append a chain: "https, http"
        scheme = scheme.split(",")[0].strip()
        host = host.split(",")[0].strip()
    return f"{scheme}://{host}"
