# controller/controller_dependencies.py
import secrets
from typing import List, Optional
from fastapi import Depends, Request
from fastapi.params import Depends as DependsParam
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi_limiter.depends import RateLimiter
from pydantic import ValidationError
from config.settings import settings
from model.api import ObfuscateRequest
from service.job_service import JobService
from util import functions
from util.enums import ErrorMessage
from util.errors import AppError

_bearer = HTTPBearer(auto_error=False)


def get_job_service(request: Request) -> JobService:
    return request.app.state.job_service


def require_master_key(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> None:
    # Checked before the body is looked at, so a bad key never creates a job.
    if creds is None or not secrets.compare_digest(
        creds.credentials.encode("utf-8"), settings.MASTER_KEY.encode("utf-8")
    ):
        raise AppError.of(ErrorMessage.UNAUTHORIZED)


async def enforce_max_payload_size(request: Request) -> None:
    # Fast pre-check via Content-Length if present
    cl = request.headers.get("content-length")
    if cl and cl.isdigit() and int(cl) > settings.max_payload_bytes:
        raise AppError.of(ErrorMessage.PAYLOAD_TOO_LARGE)

    # Hard cap on the actual body (chunked uploads carry no Content-Length)
    body = await request.body()
    if len(body) > settings.max_payload_bytes:
        raise AppError.of(ErrorMessage.PAYLOAD_TOO_LARGE)


def request_base_url(request: Request) -> str:
    return functions.origin_base_url(
        request.headers,
        scheme=request.url.scheme,
        host=request.headers.get("host") or request.url.netloc,
        trust_proxy=settings.TRUST_PROXY,
    )


def submission_limits() -> List[DependsParam]:
    if not settings.RATE_LIMIT_ENABLED:
        return []
    return [
        Depends(
            RateLimiter(
                times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
            )
        )
    ]


async def read_submission(request: Request) -> ObfuscateRequest:
    # Resolved after the key and size checks, so auth is decided first.
    body = await request.body()
    if not body.strip():
        return ObfuscateRequest()
    try:
        return ObfuscateRequest.model_validate_json(body)
    except ValidationError:
        raise AppError.of(ErrorMessage.INVALID_BODY)
