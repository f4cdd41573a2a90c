# controller/job_controller.py
from fastapi import APIRouter, Depends, Request
from config.settings import settings
from model.api import (
    ApiStatusResponse,
    JobStatusResponse,
    ObfuscateRequest,
    ObfuscateResponse,
    QueueStatus,
)
from model.job import JobOptions, JobRequest
from service.job_service import JobService
from util.constants import InternalURIs
from controller.controller_dependencies import (
    enforce_max_payload_size,
    get_job_service,
    read_submission,
    request_base_url,
    require_master_key,
    submission_limits,
)

job_router = APIRouter()


@job_router.post(
    InternalURIs.OBFUSCATE,
    response_model=ObfuscateResponse,
    dependencies=[
        Depends(require_master_key),
        Depends(enforce_max_payload_size),
        *submission_limits(),
    ],
)
async def obfuscate(
    request: Request,
    payload: ObfuscateRequest = Depends(read_submission),
    service: JobService = Depends(get_job_service),
) -> ObfuscateResponse:
    base_url = request_base_url(request)
    submission = service.submit(
        JobRequest(
            script=payload.script or "",
            profile=payload.profile,
            options=payload.options or JobOptions(),
        ),
        base_url=base_url,
    )
    job_id = submission.job.id
    return ObfuscateResponse(
        job_id=job_id,
        status_url=f"{base_url}{InternalURIs.STATUS}/{job_id}",
        queue_position=submission.queue_position,
    )


@job_router.get(InternalURIs.STATUS, response_model=ApiStatusResponse)
async def api_status(
    service: JobService = Depends(get_job_service),
) -> ApiStatusResponse:
    return ApiStatusResponse(
        version=settings.API_VERSION,
        queue=QueueStatus(**service.global_status()),
    )


@job_router.get(
    InternalURIs.JOB_STATUS,
    response_model=JobStatusResponse,
    response_model_exclude_none=True,
)
async def job_status(
    job_id: str,
    service: JobService = Depends(get_job_service),
) -> JobStatusResponse:
    return service.job_status(job_id)
